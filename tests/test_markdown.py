import itertools

import pytest

from doc2readme.markdown import heading, humanize_package_clause, split_synopsis, synopsis, to_markdown


@pytest.mark.parametrize(
	"text",
	[
		"",
		"Package foo does X. It also does Y.",
		"No boundary at all",
		"Short summary\n\nLonger body. With two sentences.",
		"Uses e.g. tabs. Then spaces.",
		"  Leading blank.  Trailing blank.  ",
		"Is it done? Yes!",
		"Copyright 2024 ACME. All of it.",
	],
)
def test_split_synopsis_partitions_text(text):
	sentence, remainder = split_synopsis(text)
	assert sentence + remainder == text


def test_package_clause_scenario():
	nice = humanize_package_clause("Package foo does X. It also does Y.")
	assert nice == "The foo project does X. It also does Y."
	assert split_synopsis(nice) == ("The foo project does X.", " It also does Y.")


def test_package_clause_only_at_start():
	assert humanize_package_clause("See Package foo.") == "See Package foo."


def test_synopsis_skips_abbreviations_and_initials():
	assert synopsis("Parses text, e.g. docstrings. Then more.") == "Parses text, e.g. docstrings."
	assert synopsis("Handles case X. Then case Y.") == "Handles case X."
	assert synopsis("Follows U.S. spelling rules. More.") == "Follows U.S. spelling rules."


def test_synopsis_stops_at_paragraph_end():
	assert split_synopsis("Short summary\n\nBody.") == ("Short summary", "\n\nBody.")


def test_synopsis_collapses_whitespace():
	assert synopsis("A long\n   sentence here. Rest") == "A long sentence here."


def test_synopsis_ignores_copyright():
	text = "Copyright 2024 ACME. All of it."
	assert split_synopsis(text) == ("", text)
	assert synopsis(text) == ""


def test_question_and_exclamation_end_sentences():
	assert synopsis("Is it done? Yes!") == "Is it done?"


def test_heading():
	assert heading("Usage") == "Usage"
	assert heading("  Example Template ") == "Example Template"
	assert heading("The project's API") == "The project's API"
	assert heading("Version 2.0") == "Version 2.0"
	assert heading("usage") == ""
	assert heading("Note: read this") == ""
	assert heading("Usage.") == ""
	assert heading("Don't panic") == ""
	assert heading("### Usage") == ""


def test_heading_block():
	assert to_markdown("Intro text.\n\nUsage\n\nRun it.") == "Intro text.\n\n### Usage\n\nRun it.\n"


def test_first_line_is_never_a_heading():
	assert to_markdown("Usage\n\nRun it.") == "Usage\n\nRun it.\n"


def test_heading_needs_following_prose():
	assert to_markdown("Intro.\n\nUsage\n\n    code") == "Intro.\n\nUsage\n\n```\ncode\n```\n"


def test_code_block_keeps_relative_indentation():
	text = "Run:\n\n    doc2readme render .\n      --strict\n\n    doc2readme model .\n\nDone."
	assert to_markdown(text) == (
		"Run:\n\n"
		"```\n"
		"doc2readme render .\n"
		"  --strict\n"
		"\n"
		"doc2readme model .\n"
		"```\n\n"
		"Done.\n"
	)


def test_doctest_blocks():
	assert to_markdown(">>> 1 + 1\n2") == "```pycon\n>>> 1 + 1\n2\n```\n"
	assert to_markdown("Try:\n\n    >>> 1 + 1\n    2") == "Try:\n\n```pycon\n>>> 1 + 1\n2\n```\n"


def test_paragraphs_pass_through_unmodified():
	text = "Call build_package_doc and\nread DocumentationNode.doc_text."
	assert to_markdown(text) == text + "\n"


def test_common_indentation_removed():
	assert to_markdown("  First line.\n  Second line.") == "First line.\nSecond line.\n"


def test_empty_text():
	assert to_markdown("") == ""
	assert to_markdown("\n  \n") == ""


@pytest.mark.parametrize(
	"text",
	[
		"Intro text.\n\nUsage\n\nRun it.\n\n    doc2readme render .\n\nDone.",
		"Try:\n\n    >>> 1 + 1\n    2\n\nExample Template\n\nIt renders.",
		"Intro.\n\n    def f():\n\n        return 1\n",
		"Intro.\n\nUsage\n\n    code",
		"Intro.\n\nUsage\n\n>>> 1 + 1\n2",
	],
)
def test_conversion_is_idempotent(text):
	once = to_markdown(text)
	assert to_markdown(once) == once


SENTENCES = [
	"Package foo does X.",
	"Uses e.g. tabs.",
	"Follows U.S. rules!",
	"Is it done?",
	"No boundary",
	"Copyright 2024 ACME.",
	"Ends in a full stop。",
]
SEPARATORS = ["", " ", "\n", "\n\n", "  \n\t"]
GENERATED = list(itertools.product(SENTENCES, SEPARATORS, SENTENCES))


@pytest.mark.parametrize("first, sep, second", GENERATED)
def test_split_synopsis_partitions_generated_text(first, sep, second):
	text = first + sep + second
	sentence, remainder = split_synopsis(text)
	assert sentence + remainder == text
	assert synopsis(text) == " ".join(sentence.split())
	if sep and not first.startswith(("No boundary", "Copyright")):
		assert sentence == first
		assert remainder == sep + second
