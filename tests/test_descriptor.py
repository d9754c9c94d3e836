import json
import os
import stat
import tempfile
import unittest
from unittest import mock

from v5upload import descriptor
from v5upload.artifact import BuildArtifact
from v5upload.errors import PersistenceFailure


class TestProjectName(unittest.TestCase):
    def test_strips_through_first_slash(self) -> None:
        self.assertEqual(descriptor.project_name("myproj"), "myproj")
        self.assertEqual(descriptor.project_name("build/robot.elf"), "robot.elf")
        self.assertEqual(descriptor.project_name("a/b/c"), "b/c")


class TestWrite(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "project.pros")
        self.artifact = BuildArtifact("build/robot.elf", "build/robot.elf.bin")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _load(self):
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def test_envelope_and_fields(self) -> None:
        with mock.patch("builtins.print"):
            descriptor.write(self.artifact, "myproj", path=self.path)
        data = self._load()

        self.assertEqual(data["py/object"], "pros.conductor.project.Project")
        state = data["py/state"]
        self.assertEqual(state["project_name"], "myproj")
        self.assertEqual(state["target"], "v5")
        self.assertEqual(state["upload_options"], {})
        kernel = state["templates"]["kernel"]
        self.assertEqual(kernel["py/object"], "pros.conductor.templates.local_template.LocalTemplate")
        self.assertEqual(kernel["metadata"], {"origin": "pros-mainline", "output": "build/robot.elf.bin"})
        self.assertEqual(kernel["location"], "")
        self.assertEqual(kernel["name"], "kernel")
        self.assertIsNone(kernel["supported_kernels"])
        self.assertEqual(kernel["system_files"], [])
        self.assertEqual(kernel["user_files"], [])
        self.assertEqual(kernel["target"], "v5")
        self.assertEqual(kernel["version"], descriptor.KERNEL_VERSION)

    def test_overwrites_instead_of_merging(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"py/state": {"project_name": "old", "extra": 1}}, f)
        with mock.patch("builtins.print"):
            descriptor.write(self.artifact, "new", path=self.path)
        state = self._load()["py/state"]
        self.assertEqual(state["project_name"], "new")
        self.assertNotIn("extra", state)
        self.assertEqual(os.listdir(self._tmp.name), ["project.pros"])

    def test_failed_write_leaves_previous_file(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("previous")
        with mock.patch("os.replace", side_effect=PermissionError("denied")), \
                mock.patch("builtins.print"):
            with self.assertRaises(PersistenceFailure):
                descriptor.write(self.artifact, "myproj", path=self.path)
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "previous")
        self.assertEqual(os.listdir(self._tmp.name), ["project.pros"])

    def test_missing_directory_raises(self) -> None:
        path = os.path.join(self._tmp.name, "nope", "project.pros")
        with self.assertRaises(PersistenceFailure):
            descriptor.write(self.artifact, "myproj", path=path)

    @unittest.skipIf(os.name == "nt", "POSIX permission bits")
    def test_keeps_existing_file_mode(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{}")
        os.chmod(self.path, 0o600)
        with mock.patch("builtins.print"):
            descriptor.write(self.artifact, "myproj", path=self.path)
        self.assertEqual(stat.S_IMODE(os.stat(self.path).st_mode), 0o600)

    @unittest.skipIf(os.name == "nt", "POSIX permission bits")
    def test_new_file_follows_umask(self) -> None:
        old = os.umask(0o027)
        try:
            with mock.patch("builtins.print"):
                descriptor.write(self.artifact, "myproj", path=self.path)
        finally:
            os.umask(old)
        self.assertEqual(stat.S_IMODE(os.stat(self.path).st_mode), 0o640)

    def test_fdopen_failure_closes_descriptor(self) -> None:
        real_close = os.close
        with mock.patch("os.fdopen", side_effect=OSError("no fd")), \
                mock.patch("os.close", side_effect=real_close) as close:
            with self.assertRaises(PersistenceFailure):
                descriptor.write(self.artifact, "myproj", path=self.path)
        close.assert_called_once()
        self.assertEqual(os.listdir(self._tmp.name), [])


if __name__ == "__main__":
    unittest.main()
