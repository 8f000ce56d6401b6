"""Conversion of docstring prose into markdown.

Docstrings follow the plain-text conventions most Python projects use:

- paragraphs are separated by blank lines,
- indented text is code,
- a short capitalized line on its own, followed by prose, is a section header.
"""

from __future__ import annotations

import os
import re
from typing import List, Tuple

FENCE = "```"
HEADING_PREFIX = "### "

PACKAGE_CLAUSE = re.compile(r"^Package (\w+)")

ABBREVIATIONS = frozenset({
	"e.g.", "i.e.", "cf.", "vs.", "viz.", "approx.",
	"mr.", "mrs.", "ms.", "dr.", "st.",
})
INITIALS = re.compile(r"^(?:[A-Z]\.){2,}$")
FULL_STOPS = "。．"
NON_SYNOPSIS_PREFIXES = ("copyright", "all rights", "author")

HEADING_ILLEGAL = frozenset(";:!?+*/=[]{}_^°&§~%#@<\">\\`|")

Block = Tuple[str, List[str]]


def humanize_package_clause(text: str) -> str:
	"""Rewrite a leading ``Package foo`` into ``The foo project``."""
	return PACKAGE_CLAUSE.sub(r"The \1 project", text, count=1)


def _is_abbreviation(text: str, i: int) -> bool:
	start = i
	while start > 0 and not text[start - 1].isspace():
		start -= 1
	word = text[start:i + 1].lstrip("([{\"'")
	return word.lower() in ABBREVIATIONS or bool(INITIALS.match(word))


def _paragraph_ends_at(text: str, i: int) -> bool:
	end = text.find("\n", i + 1)
	return end != -1 and not text[i + 1:end].strip() and bool(text[:i].strip())


def _first_sentence_end(text: str) -> int:
	for i, ch in enumerate(text):
		if ch in FULL_STOPS:
			return i + 1
		if ch == "\n" and _paragraph_ends_at(text, i):
			return i
		if ch in ".?!" and (i + 1 == len(text) or text[i + 1].isspace()):
			if ch == "." and _is_abbreviation(text, i):
				continue
			return i + 1
	return len(text)


def split_synopsis(text: str) -> Tuple[str, str]:
	"""Split raw doc text into its first sentence and the remainder.

	The two parts always concatenate back to ``text``. Legal boilerplate is not
	a synopsis, so a text opening with a copyright line splits as ``("", text)``.
	"""
	end = _first_sentence_end(text)
	sentence = text[:end]
	if sentence.strip().lower().startswith(NON_SYNOPSIS_PREFIXES):
		return "", text
	return sentence, text[end:]


def synopsis(text: str) -> str:
	return " ".join(split_synopsis(text)[0].split())


def _is_blank(line: str) -> bool:
	return not line.strip()


def _indent_len(line: str) -> int:
	return len(line) - len(line.lstrip())


def _unindent(lines: List[str]) -> List[str]:
	prefix = os.path.commonprefix([line[:_indent_len(line)] for line in lines if not _is_blank(line)])
	return ["" if _is_blank(line) else line[len(prefix):] for line in lines]


def heading(line: str) -> str:
	"""Return ``line`` stripped if it can serve as a section header, else ""."""
	line = line.strip()
	if not line or not (line[0].isalpha() and line[0].isupper()):
		return ""
	if not line[-1].isalnum():
		return ""
	if any(ch in HEADING_ILLEGAL for ch in line):
		return ""
	for i, ch in enumerate(line):
		# apostrophes only in a possessive "'s", periods only inside words
		if ch == "'" and (line[i + 1:i + 2] != "s" or line[i + 2:i + 3] not in ("", " ")):
			return ""
		if ch == "." and line[i + 1:i + 2] in ("", " "):
			return ""
	return line


def _blocks(text: str) -> List[Block]:
	lines = _unindent(text.splitlines())
	blocks: List[Block] = []
	last_was_blank = False
	last_was_heading = False
	i, n = 0, len(lines)
	while i < n:
		line = lines[i]
		if _is_blank(line):
			last_was_blank = True
			i += 1
			continue

		if line.startswith(FENCE):
			j = i + 1
			while j < n and not lines[j].startswith(FENCE):
				j += 1
			j = min(j + 1, n)
			blocks.append(("verbatim", lines[i:j]))
		elif _indent_len(line) > 0:
			j = i
			while j < n and (_is_blank(lines[j]) or _indent_len(lines[j]) > 0):
				j += 1
			while _is_blank(lines[j - 1]):
				j -= 1
			blocks.append(("code", _unindent(lines[i:j])))
		elif line.startswith(">>>"):
			j = i
			while j < n and not _is_blank(lines[j]):
				j += 1
			blocks.append(("doctest", lines[i:j]))
		elif (
			last_was_blank
			and not last_was_heading
			and i + 2 < n
			and _is_blank(lines[i + 1])
			and not _is_blank(lines[i + 2])
			and _indent_len(lines[i + 2]) == 0
			and not lines[i + 2].startswith((FENCE, ">>>"))
			and heading(line)
		):
			blocks.append(("heading", [heading(line)]))
			last_was_blank = False
			last_was_heading = True
			i += 1
			continue
		else:
			j = i + 1
			while j < n and not _is_blank(lines[j]) and _indent_len(lines[j]) == 0 and not lines[j].startswith(FENCE):
				j += 1
			blocks.append(("paragraph", lines[i:j]))

		last_was_blank = False
		last_was_heading = False
		i = j
	return blocks


def _render_block(kind: str, lines: List[str]) -> str:
	if kind == "heading":
		return HEADING_PREFIX + lines[0]
	if kind == "code":
		lang = "pycon" if lines[0].startswith(">>>") else ""
		return "\n".join([FENCE + lang] + lines + [FENCE])
	if kind == "doctest":
		return "\n".join([FENCE + "pycon"] + lines + [FENCE])
	return "\n".join(lines)


def to_markdown(text: str) -> str:
	"""Convert docstring prose into markdown.

	Output that already went through this function converts to itself: existing
	fences are copied verbatim and ``### `` lines never qualify as headers.
	"""
	blocks = _blocks(text)
	if not blocks:
		return ""
	return "\n\n".join(_render_block(kind, lines) for kind, lines in blocks) + "\n"
