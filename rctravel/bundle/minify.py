"""
Module that shrinks rc-files by removing comments and blank lines.

Every recognized file format has its own line classifier that knows the comment syntax
of that format. Comment markers are only recognized outside of quotes, but the
classifiers are simple line-based tokenizers rather than full parsers.
Whenever a file contains a construct that they can't reason about, like a quote that
spans multiple lines or a here-document, the classifier refuses to touch the file and
it travels unmodified instead.
"""

from abc import ABC, abstractmethod
import fnmatch
import os
import shutil
from typing import List, Optional

from rctravel.logger import log
from .common import UnsafeMinification
from .source import RcSource


class LineClassifier(ABC):
    """Base class for the comment stripping rules of a file format."""

    def minify(self, text: str) -> str:
        """
        Return the text with comments, blank lines and trailing whitespace removed.

        Raises UnsafeMinification if the text can't be minified without risking a
        change in behavior.
        """
        lines: List[str] = []

        for number, line in enumerate(text.splitlines(), start=1):
            minified_line = self.minify_line(line, number)

            if minified_line:
                lines.append(minified_line)

        if not lines:
            return ""

        return "\n".join(lines) + "\n"

    @abstractmethod
    def minify_line(self, line: str, number: int) -> Optional[str]:
        """Minify a single line, returning None if the line should be dropped."""
        raise NotImplementedError()


class ShellClassifier(LineClassifier):
    """
    Comment rules of POSIX shell and anything else that uses # comments.

    A full-line comment is a line whose first non-blank character is #, except for
    #! lines to keep shebangs intact. A trailing comment starts at whitespace followed
    by "# " outside of quotes.

    A line that follows a backslash line continuation is joined with the previous line
    by the shell, so a comment there is kept as is. A blank line there ends the
    command and can't be dropped, which makes the file unsafe to minify.
    """

    def __init__(self) -> None:
        """Initialize the classifier outside of a line continuation."""
        self._continued = False

    def minify(self, text: str) -> str:
        self._continued = False

        return super().minify(text)

    def minify_line(self, line: str, number: int) -> Optional[str]:
        """Minify a single line of shell code."""
        continued = self._continued
        self._continued = False

        stripped = line.strip()

        if not stripped:
            if continued:
                raise UnsafeMinification("blank line ends line continuation", number)

            return None

        if stripped.startswith("#") and not stripped.startswith("#!"):
            return line.rstrip() if continued else None

        end = self._find_comment(line, number)
        code = line[:end]

        # A backslash only continues the line if nothing follows it
        self._continued = end == len(line) and self._ends_with_escape(line)

        minified_line = code.rstrip()

        # Keep whitespace that is escaped by a trailing backslash
        if self._ends_with_escape(minified_line) and minified_line != code:
            minified_line = code[: len(minified_line) + 1]

        return minified_line

    @staticmethod
    def _ends_with_escape(text: str) -> bool:
        return (len(text) - len(text.rstrip("\\"))) % 2 == 1

    @staticmethod
    def _find_comment(line: str, number: int) -> int:
        """Find the start of a trailing comment, or the line length if there is none."""
        in_single = False
        in_double = False
        escaped = False
        escaped_at = -1

        for i, c in enumerate(line):
            if escaped:
                escaped = False
                escaped_at = i
            elif in_single:
                in_single = c != "'"
            elif c == "\\":
                escaped = True
            elif c == '"':
                in_double = not in_double
            elif in_double:
                continue
            elif c == "'":
                in_single = True
            elif c == "<" and line.startswith("<<", i):
                if not line.startswith("<<<", i) and line[i - 1 : i] != "<":
                    raise UnsafeMinification("here-document", number)
            elif c == "#" and i > 0 and line[i - 1].isspace() and escaped_at != i - 1:
                if line.startswith("# ", i):
                    return i

        if in_single or in_double:
            raise UnsafeMinification("quote spans multiple lines", number)

        return len(line)


class VimClassifier(LineClassifier):
    """
    Comment rules of Vim script.

    Double quotes both start comments and delimit strings. A double quote preceded by
    whitespace and followed by a space starts a trailing comment when no other double
    quote follows it on the same line. Vim strings never span lines, so an ambiguous
    line is simply left as it is.
    """

    def minify_line(self, line: str, number: int) -> Optional[str]:
        """Minify a single line of Vim script."""
        stripped = line.strip()

        if not stripped or stripped.startswith('"'):
            return None

        return line[: self._find_comment(line)].rstrip()

    @staticmethod
    def _find_comment(line: str) -> int:
        in_single = False
        in_double = False
        escaped = False

        for i, c in enumerate(line):
            if escaped:
                escaped = False
            elif in_single:
                in_single = c != "'"
            elif in_double:
                escaped = c == "\\"
                in_double = c != '"'
            elif c == "'":
                in_single = True
            elif c == '"':
                if (
                    i > 0
                    and line[i - 1].isspace()
                    and line.startswith('" ', i)
                    and '"' not in line[i + 1 :]
                ):
                    return i

                in_double = True

        return len(line)


# File name patterns that use Vim comment syntax
VIM_PATTERNS = [".vimrc", "*.vim", ".gvimrc", ".exrc"]


def classifier_for(filename: str) -> LineClassifier:
    """Get the line classifier that matches the format of the file."""
    name = os.path.basename(filename)

    if any(fnmatch.fnmatch(name, pattern) for pattern in VIM_PATTERNS):
        return VimClassifier()
    else:
        return ShellClassifier()


def minify_file(path: str) -> bool:
    """
    Minify the file in place.

    This is best effort: a file that can't be minified is left untouched and False is
    returned.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError:
        log.debug(f"not minifying binary file {path}")
        return False

    try:
        minified_text = classifier_for(path).minify(text)
    except UnsafeMinification as e:
        log.debug(f"not minifying {path}: {e}")
        return False

    if minified_text != text:
        st = os.stat(path)

        with open(path, "w", encoding="utf-8") as f:
            f.write(minified_text)

        # Keep the timestamp of the original so the payload only depends on contents
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns))

    return True


def minify_tree(source: RcSource, staging_dir: str) -> str:
    """
    Copy the rc-files into the staging directory and minify the copies.

    Symbolic links are replaced by the contents of their targets, since those targets
    won't exist on the other side. Returns the path of the minified copy.
    """
    source.validate()

    destination = os.path.join(staging_dir, "bundle")

    shutil.copytree(
        source.path, destination, symlinks=False, ignore_dangling_symlinks=True
    )

    for dirpath, _, filenames in os.walk(destination):
        for filename in filenames:
            path = os.path.join(dirpath, filename)

            minify_file(path)

    return destination
