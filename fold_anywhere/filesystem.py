"""Reading notes from disk and writing them back safely."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, NOTE_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "FOLD_ANYWHERE_MAX_FILE_SIZE"


@dataclass(frozen=True)
class NoteFile:
    """A note read from disk.

    Attributes:
        path: Absolute path of the note.
        text: Full text, line endings preserved.
        stat: File metadata captured before the text was read; used to
            detect concurrent edits before writing back.
    """

    path: Path
    text: str
    stat: os.stat_result


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the note size limit in bytes, honouring `FOLD_ANYWHERE_MAX_FILE_SIZE`.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["FOLD_ANYWHERE_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size()
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR, "").strip()
    if not raw_value:
        return default

    if not (raw_value.isascii() and raw_value.isdigit()) or int(raw_value) == 0:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive number of bytes, got {raw_value!r}"
        )
    return int(raw_value)


def resolve_note(raw_path: str, base_dir: Path) -> Path:
    """Resolve a user-supplied note path and check that it may be processed.

    Args:
        raw_path: Path given on the command line (absolute or relative).
        base_dir: Working directory the note must live under.

    Returns:
        Path: Absolute path to the note.

    Raises:
        ValueError: If the path is missing, not a regular file, outside
            `base_dir`, or not a note file.

    Examples:
        resolve_note("notes/today.md", Path.cwd())
    """
    path = Path(raw_path).expanduser()
    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"{path} cannot be resolved: {error}") from error

    if not resolved.is_file():
        problem = "is not a regular file"
    elif not resolved.is_relative_to(base_dir):
        problem = f"is outside of the working directory {base_dir}"
    elif resolved.suffix.lower() not in NOTE_EXTENSIONS:
        problem = f"is not a note file (expected one of: {', '.join(NOTE_EXTENSIONS)})"
    else:
        return resolved
    raise ValueError(f"{resolved} {problem}.")


def document_key(filepath: Path, base_dir: Path) -> str:
    """Return the identity under which a document's folds are stored.

    Keys are POSIX paths relative to `base_dir`, so an index survives moving
    the whole vault.

    Examples:
        document_key(Path("/vault/a/b.md"), Path("/vault"))  # "a/b.md"
    """
    try:
        return filepath.relative_to(base_dir).as_posix()
    except ValueError:
        return filepath.as_posix()


def _stat_note(filepath: Path) -> os.stat_result:
    try:
        stat_result = os.stat(filepath)
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error

    if not stat.S_ISREG(stat_result.st_mode):
        raise IOError(f"{filepath} is not a regular file.")
    return stat_result


def _fingerprint(stat_result: os.stat_result) -> tuple:
    return (
        getattr(stat_result, "st_ino", None),
        getattr(stat_result, "st_dev", None),
        stat_result.st_size,
        stat_result.st_mtime_ns,
    )


def read_note(filepath: Path, max_size: int) -> NoteFile:
    """Read a note as UTF-8 text, refusing files larger than `max_size` bytes.

    Raises:
        IOError: If the note is inaccessible, not a regular file, or too large.
        UnicodeDecodeError: If the note is not valid UTF-8.

    Examples:
        note = read_note(Path("note.md"), get_max_file_size())
    """
    stat_result = _stat_note(filepath)
    if stat_result.st_size > max_size:
        raise IOError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")

    try:
        with open(filepath, encoding="UTF-8", newline="") as stream:
            text = stream.read()
    except OSError as error:
        raise IOError(f"Error reading {filepath}: {error}") from error
    return NoteFile(path=filepath, text=text, stat=stat_result)


def write_text_atomic(filepath: Path, text: str, permissions: int | None = None):
    """Write `text` to `filepath` through a temporary file and ``os.replace``.

    Args:
        filepath: Destination path; its parent directory must exist.
        text: Content to write.
        permissions: Mode bits applied to the new file, if given.

    Raises:
        OSError: If the temporary file cannot be written or moved into place.
    """
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", newline="", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            if permissions is not None:
                os.chmod(tmp_file.name, permissions)

        os.replace(temp_path, filepath)
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass


def rewrite_note(note: NoteFile, text: str, warn: Callable[[str], None] | None = None):
    """Replace a note's content, refusing if the file changed since `note` was read.

    Permissions are kept; ownership is kept when the process is allowed to.

    Args:
        note: The note as previously read.
        text: New content.
        warn: Optional callback for non-fatal warnings.

    Raises:
        IOError: If the file changed on disk or cannot be replaced atomically.
    """
    if _fingerprint(_stat_note(note.path)) != _fingerprint(note.stat):
        raise IOError(f"{note.path} changed during processing; refusing to overwrite.")

    write_text_atomic(note.path, text, permissions=stat.S_IMODE(note.stat.st_mode))

    uid = getattr(note.stat, "st_uid", None)
    gid = getattr(note.stat, "st_gid", None)
    if uid is None or gid is None or not hasattr(os, "chown"):
        return
    try:
        os.chown(note.path, uid, gid)
    except PermissionError:
        if warn is not None:
            warn(f"Warning: Could not preserve file ownership for {note.path.name}")
