import unittest


class TestQuoteNormalize(unittest.TestCase):
    def test_any_unindented_later_line_keeps_line_breaks(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize("  foo\n  bar\nbaz"), "> foo\n> bar\n> baz\n\n")

    def test_fully_indented_block_is_unwrapped(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize("  foo\n  bar\n  baz"), "> foo bar baz\n\n")

    def test_key_value_lines_stay_separate(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize("  key1: value1\n  key2: value2"), "> key1: value1\n> key2: value2\n\n")
        self.assertEqual(
            normalize("  key1: value1\n  key2: value2\n  key3: value3"),
            "> key1: value1\n> key2: value2\n> key3: value3\n\n",
        )

    def test_no_space_at_ideographic_boundary(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(
            normalize("  fooはbar\n  ということが分かった"),
            "> fooはbarということが分かった\n\n",
        )

    def test_list_items_start_new_lines(self) -> None:
        from editprompt.kernel.quote import normalize

        text = "  - fooって実は\n  barなんだ\n  - じつはhoge\n  piyoには秘密がある\n  - さらにbarは\n  buzなんだよ"
        self.assertEqual(
            normalize(text),
            "> - fooって実はbarなんだ\n> - じつはhoge piyoには秘密がある\n> - さらにbarはbuzなんだよ\n\n",
        )

    def test_blank_lines_are_kept_and_prefixed(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize("  foo\n\n  bar"), "> foo\n> \n> bar\n\n")

    def test_leading_and_trailing_blank_lines_are_removed(self) -> None:
        from editprompt.kernel.quote import normalize

        for text in ("\n  foo\n  bar\n", "\n\n\n  foo\n  bar\n\n\n", "\n\n  foo\n  bar", "  foo\n  bar\n\n"):
            with self.subTest(text=text):
                self.assertEqual(normalize(text), "> foo bar\n\n")

    def test_wrapped_continuation_lines_are_unindented(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(
            normalize("Line one wraps\n  and continues\n  even more"),
            "> Line one wraps and continues even more\n\n",
        )

    def test_trailing_spaces_dropped_before_joining(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize("- option --no-  \n  quote-behavior"), "> - option --no-quote-behavior\n\n")

    def test_soft_wrapped_line_rejoined_when_structure_is_kept(self) -> None:
        from editprompt.kernel.quote import normalize

        text = (
            "- src/modes/collect.ts: allows buffer/stdout outputs and --no-\n"
            "  quote to skip quoting while writing to stdout.\n"
            "- another bullet"
        )
        self.assertEqual(
            normalize(text),
            "> - src/modes/collect.ts: allows buffer/stdout outputs and --no-quote to skip quoting"
            " while writing to stdout.\n> - another bullet\n\n",
        )

    def test_without_prefix(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize("\n  foo\n  bar\n\n", with_quote_prefix=False), "foo bar")
        self.assertEqual(normalize("  foo\n  bar\nbaz", with_quote_prefix=False), "foo\nbar\nbaz")

    def test_empty_input(self) -> None:
        from editprompt.kernel.quote import normalize

        self.assertEqual(normalize(""), "")
        self.assertEqual(normalize("\n \n\t\n"), "")

    def test_idempotent_without_prefix(self) -> None:
        from editprompt.kernel.quote import normalize

        samples = [
            "  foo\n  bar\nbaz",
            "  foo\n  bar\n  baz",
            "  key1: value1\n  key2: value2",
            "  foo\n\n  bar",
            "Line one wraps\n  and continues\n  even more",
            "  - item one\n  continued\n  - item two",
            "  fooはbar\n  ということが分かった",
            "header\n    - nested\n      deeper\ntail",
            "a\n\tb\n\tc",
            "single line",
        ]
        for text in samples:
            with self.subTest(text=text):
                once = normalize(text, with_quote_prefix=False)
                self.assertEqual(normalize(once, with_quote_prefix=False), once)


if __name__ == "__main__":
    unittest.main()
