import pytest

from dirguard.errors import DirectoryEnumerationError
from dirguard.flatten import (
    ConcatenationStyle,
    concatenate_to_bytes,
    concatenate_to_string,
    generate_git_patch,
    generate_single_file,
    relevant_source_files,
    write_git_patch,
)


@pytest.fixture
def source_tree(tmp_path):
    (tmp_path / "Sources").mkdir()
    (tmp_path / "Sources" / "a.swift").write_text("let a = 1\n", encoding="utf-8")
    (tmp_path / "Sources" / "b.swift").write_text("let b = 2", encoding="utf-8")
    (tmp_path / "Sources" / "bridge.h").write_text("// header", encoding="utf-8")
    (tmp_path / ".build").mkdir()
    (tmp_path / ".build" / "cache.swift").write_text("ignored", encoding="utf-8")
    (tmp_path / "Package.resolved").write_text("{}", encoding="utf-8")
    (tmp_path / "notes.md").write_text("# notes", encoding="utf-8")
    return tmp_path


def test_relevant_files_apply_default_and_extra_ignores(source_tree):
    files = relevant_source_files(source_tree, ignoring_suffixes=[".h"])

    assert files == [
        source_tree / "Sources" / "a.swift",
        source_tree / "Sources" / "b.swift",
        source_tree / "notes.md",
    ]


def test_relevant_files_allowed_suffixes(source_tree):
    files = relevant_source_files(source_tree, allowed_suffixes=[".swift"])

    assert [path.name for path in files] == ["a.swift", "b.swift"]


def test_relevant_files_ignore_whole_directory_by_suffix(source_tree):
    files = relevant_source_files(source_tree, ignoring_suffixes=["Sources"])

    assert files == [source_tree / "notes.md"]


def test_relevant_files_missing_directory_raises(tmp_path):
    with pytest.raises(DirectoryEnumerationError):
        relevant_source_files(tmp_path / "missing")


def test_concatenate_to_string_adds_path_headers(source_tree):
    a = source_tree / "Sources" / "a.swift"
    b = source_tree / "Sources" / "b.swift"

    merged = concatenate_to_string([a, b])

    assert merged == f"// {a}\nlet a = 1\n\n// {b}\nlet b = 2\n"


def test_unreadable_files_are_skipped(source_tree):
    a = source_tree / "Sources" / "a.swift"

    assert concatenate_to_string([source_tree / "gone.swift", a]) == f"// {a}\nlet a = 1\n\n"
    assert concatenate_to_bytes([source_tree / "gone.swift"]) == b""


def test_bytes_and_string_styles_agree(source_tree, tmp_path):
    files = relevant_source_files(source_tree, allowed_suffixes=[".swift"])
    string_out = tmp_path / "string.txt"
    data_out = tmp_path / "data.txt"

    generate_single_file(files, string_out)
    generate_single_file(files, data_out, style=ConcatenationStyle.DATA)

    assert concatenate_to_bytes(files) == concatenate_to_string(files).encode("utf-8")
    assert string_out.read_text(encoding="utf-8") == data_out.read_text(encoding="utf-8")


def test_git_patch_creates_new_file_hunks(source_tree, tmp_path):
    a = source_tree / "Sources" / "a.swift"
    b = source_tree / "Sources" / "b.swift"

    patch = generate_git_patch([a, b])

    assert patch == (
        f"diff --git a/{a} b/{a}\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        f"+++ b/{a}\n"
        "@@ -0,0 +1,1 @@\n"
        "+let a = 1\n"
        f"diff --git a/{b} b/{b}\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        f"+++ b/{b}\n"
        "@@ -0,0 +1,1 @@\n"
        "+let b = 2\n"
    )

    out = tmp_path / "out.patch"
    write_git_patch([a, b], out)
    assert out.read_text(encoding="utf-8") == patch
