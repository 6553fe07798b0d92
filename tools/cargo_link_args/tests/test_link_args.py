from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "cargo_link_args" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from cargo_link_args._base import CargoLinkArgsError, FrontEndError
from cargo_link_args.classifier import Destination
from cargo_link_args.config import LinkArgsConfig
from cargo_link_args.link_args import extract_link_line, split_link_line
from cargo_link_args.relocator import DefFileRelocator
from cargo_link_args.writer import LinkArgsWriter


def quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


class LinkArgsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.out_dir = self.root / "Intermediate"
        self.linker_file = self.out_dir / "linker.rsp"
        self.lib_file = self.out_dir / "lib.rsp"
        self.def_source = self.root / "target" / "mod.def"
        self.def_source.parent.mkdir(parents=True)
        self.def_source.write_text("EXPORTS\n    my_init\n", encoding="utf-8")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()


class ExtractLinkLineTests(unittest.TestCase):
    def test_returns_last_line_with_def(self) -> None:
        stdout = "Compiling demo\n" + '"link.exe" "/DEF:C:\\\\t\\\\lib.def" "foo.o"\n'
        self.assertEqual(extract_link_line(stdout), '"link.exe" "/DEF:C:\\\\t\\\\lib.def" "foo.o"')

    def test_ignores_line_without_def(self) -> None:
        self.assertIsNone(extract_link_line('"link.exe" "foo.o"\n'))

    def test_only_last_line_counts(self) -> None:
        self.assertIsNone(extract_link_line('"link.exe" "/DEF:a.def"\nFinished\n'))

    def test_empty_output(self) -> None:
        self.assertIsNone(extract_link_line(""))


class DefFileRelocatorTests(LinkArgsTestCase):
    def test_copies_existing_source(self) -> None:
        self.out_dir.mkdir()
        relocator = DefFileRelocator(self.lib_file)
        destination = relocator.relocate(str(self.def_source))
        self.assertEqual(destination, self.out_dir / "build_def.def")
        self.assertEqual(destination.read_text(encoding="utf-8"), "EXPORTS\n    my_init\n")
        self.assertEqual(relocator.copied_from, self.def_source)

    def test_overwrites_previous_copy(self) -> None:
        self.out_dir.mkdir()
        (self.out_dir / "build_def.def").write_text("stale\n", encoding="utf-8")
        DefFileRelocator(self.lib_file)(str(self.def_source))
        self.assertEqual((self.out_dir / "build_def.def").read_text(encoding="utf-8"), "EXPORTS\n    my_init\n")

    def test_missing_source_is_skipped(self) -> None:
        relocator = DefFileRelocator(self.lib_file, "custom.def")
        destination = relocator.relocate(str(self.root / "missing.def"))
        self.assertEqual(destination, self.out_dir / "custom.def")
        self.assertFalse(destination.exists())
        self.assertIsNone(relocator.copied_from)

    def test_empty_source_is_skipped(self) -> None:
        self.out_dir.mkdir()
        relocator = DefFileRelocator(self.lib_file)
        self.assertEqual(relocator.relocate(""), self.out_dir / "build_def.def")
        self.assertFalse((self.out_dir / "build_def.def").exists())
        self.assertIsNone(relocator.copied_from)

    def test_directory_source_is_skipped(self) -> None:
        relocator = DefFileRelocator(self.lib_file)
        relocator.relocate(str(self.root))
        self.assertIsNone(relocator.copied_from)

    def test_copy_failure_is_fatal(self) -> None:
        (self.out_dir / "build_def.def").mkdir(parents=True)
        with self.assertRaises(CargoLinkArgsError) as ctx:
            DefFileRelocator(self.lib_file).relocate(str(self.def_source))
        self.assertIn("Failed to copy def file", str(ctx.exception))


class LinkArgsWriterTests(LinkArgsTestCase):
    def test_truncates_both_files_on_entry(self) -> None:
        self.out_dir.mkdir()
        self.linker_file.write_text("old\n", encoding="utf-8")
        self.lib_file.write_text("old\n", encoding="utf-8")
        with LinkArgsWriter(self.linker_file, self.lib_file) as writer:
            writer.write(Destination.LINKER, '"a.lib"')
        self.assertEqual(read_lines(self.linker_file), ['"a.lib"'])
        self.assertEqual(self.lib_file.read_text(encoding="utf-8"), "")

    def test_both_writes_to_each_file(self) -> None:
        with LinkArgsWriter(self.linker_file, self.lib_file) as writer:
            writer.write(Destination.BOTH, '/DEF:"x.def"')
        self.assertEqual(writer.linker_lines, 1)
        self.assertEqual(writer.lib_lines, 1)
        self.assertEqual(read_lines(self.linker_file), ['/DEF:"x.def"'])
        self.assertEqual(read_lines(self.lib_file), ['/DEF:"x.def"'])

    def test_unopenable_lib_file_closes_linker_file(self) -> None:
        blocker = self.root / "blocker"
        blocker.write_text("", encoding="utf-8")
        writer = LinkArgsWriter(self.linker_file, blocker / "lib.rsp")
        with self.assertRaises(CargoLinkArgsError) as ctx:
            with writer:
                self.fail("writer entered despite an unopenable output file")
        self.assertIn("Unable to create output file", str(ctx.exception))
        self.assertIsNone(writer._linker)
        self.assertIsNone(writer._lib)
        self.assertTrue(self.linker_file.exists())

    def test_write_outside_context_fails(self) -> None:
        with self.assertRaises(CargoLinkArgsError):
            LinkArgsWriter(self.linker_file, self.lib_file).write(Destination.LINKER, '"a.lib"')


class SplitLinkLineTests(LinkArgsTestCase):
    def test_end_to_end_scenario(self) -> None:
        line = " ".join(
            [
                quote("C:\\VS\\bin\\link.exe"),
                quote("/LIBPATH:C:\\lib"),
                quote("foo.o"),
                quote(f"/DEF:{self.def_source}"),
                quote("bar.rlib"),
                quote("baz.dll"),
                quote("cl.exe"),
            ]
        )
        result = split_link_line(line, self.linker_file, self.lib_file)

        canonical = self.out_dir / "build_def.def"
        self.assertEqual(
            read_lines(self.linker_file),
            ['/LIBPATH:"C:\\lib"', f'/DEF:"{canonical}"', '"baz.dll"'],
        )
        self.assertEqual(
            read_lines(self.lib_file),
            ['"foo.o"', f'/DEF:"{canonical}"', '"bar.rlib"'],
        )
        self.assertTrue(canonical.exists())
        self.assertEqual(result.front_end, "C:\\VS\\bin\\link.exe")
        self.assertEqual(result.linker_lines, 3)
        self.assertEqual(result.lib_lines, 3)
        self.assertEqual(result.def_file, canonical)
        self.assertTrue(result.def_copied)

    def test_missing_def_source_still_writes_def_lines(self) -> None:
        line = " ".join([quote("lld-link.exe"), quote("/DEF:C:\\nowhere\\lib.def"), quote("foo.o")])
        result = split_link_line(line, self.linker_file, self.lib_file)

        canonical = self.out_dir / "build_def.def"
        self.assertFalse(canonical.exists())
        self.assertFalse(result.def_copied)
        self.assertEqual(read_lines(self.linker_file), [f'/DEF:"{canonical}"'])
        self.assertEqual(read_lines(self.lib_file), [f'/DEF:"{canonical}"', '"foo.o"'])

    def test_partially_quoted_line(self) -> None:
        # Opening quotes split "/DEF:" from its value, leaving the option empty.
        line = 'link.exe /LIBPATH:"C:\\lib" foo.o /DEF:"C:\\x\\y.def" bar.rlib baz.dll cl.exe'
        result = split_link_line(line, self.linker_file, self.lib_file)

        canonical = self.out_dir / "build_def.def"
        self.assertFalse(canonical.exists())
        self.assertFalse(result.def_copied)
        self.assertEqual(
            read_lines(self.linker_file),
            ['/LIBPATH:""', '"C:lib"', f'/DEF:"{canonical}"', '"C:xy.def"', '"baz.dll"'],
        )
        self.assertEqual(
            read_lines(self.lib_file),
            ['"foo.o"', f'/DEF:"{canonical}"', '"bar.rlib"'],
        )

    def test_bare_def_option(self) -> None:
        line = '"link.exe" "/DEF" "foo.o" x.def'
        split_link_line(line, self.linker_file, self.lib_file)

        canonical = self.out_dir / "build_def.def"
        self.assertEqual(read_lines(self.linker_file), [f'/DEF:"{canonical}"', '"x.def"'])
        self.assertEqual(read_lines(self.lib_file), [f'/DEF:"{canonical}"', '"foo.o"'])

    def test_def_copy_failure_aborts(self) -> None:
        (self.out_dir / "build_def.def").mkdir(parents=True)
        line = " ".join([quote("link.exe"), quote("foo.o"), quote(f"/DEF:{self.def_source}")])
        with self.assertRaises(CargoLinkArgsError):
            split_link_line(line, self.linker_file, self.lib_file)

    def test_flags_and_executables_are_filtered(self) -> None:
        line = " ".join(
            [
                quote("rust-lld.exe"),
                quote("-flavor"),
                quote("link"),
                quote("/OUT:a.dll"),
                quote("/IMPLIB:C:\\y.lib"),
                quote("/NOLOGO"),
                quote("helper.exe"),
                quote("/DEF:C:\\nowhere\\lib.def"),
            ]
        )
        split_link_line(line, self.linker_file, self.lib_file)
        self.assertEqual(
            read_lines(self.linker_file),
            ['/IMPLIB:"C:\\y.lib"', f'/DEF:"{self.out_dir / "build_def.def"}"'],
        )
        self.assertEqual(read_lines(self.lib_file), [f'/DEF:"{self.out_dir / "build_def.def"}"'])

    def test_unknown_front_end_fails_after_creating_files(self) -> None:
        line = " ".join([quote("cl.exe"), quote("/DEF:x.def"), quote("foo.o")])
        with self.assertRaises(FrontEndError):
            split_link_line(line, self.linker_file, self.lib_file)
        self.assertEqual(self.linker_file.read_text(encoding="utf-8"), "")
        self.assertEqual(self.lib_file.read_text(encoding="utf-8"), "")

    def test_config_overrides(self) -> None:
        config = LinkArgsConfig(
            linker_front_ends=("link.exe",),
            forwarded_options=("LIBPATH",),
            archive_member_suffixes=(".obj",),
            def_file_name="exports.def",
        )
        line = " ".join(
            [quote("link.exe"), quote("/IMPLIB:x.lib"), quote("a.obj"), quote("b.o"), quote(f"/DEF:{self.def_source}")]
        )
        split_link_line(line, self.linker_file, self.lib_file, config)
        canonical = self.out_dir / "exports.def"
        self.assertTrue(canonical.exists())
        self.assertEqual(read_lines(self.linker_file), ['"b.o"', f'/DEF:"{canonical}"'])
        self.assertEqual(read_lines(self.lib_file), ['"a.obj"', f'/DEF:"{canonical}"'])


if __name__ == "__main__":
    unittest.main()
