import unittest

from transform.confluence_storage import to_storage
from transform.storage_check import storage_problems, storage_text


def macro(language, body):
    return (
        '<ac:structured-macro ac:name="code">'
        f'<ac:parameter ac:name="language">{language}</ac:parameter>'
        f"<ac:plain-text-body><![CDATA[{body}]]></ac:plain-text-body>"
        "</ac:structured-macro>"
    )


class TestMarkupToStorage(unittest.TestCase):

    def test_headings(self):
        self.assertEqual(to_storage("# One"), "<h1>One</h1>")
        self.assertEqual(to_storage("## Two"), "<h2>Two</h2>")
        self.assertEqual(to_storage("### Three"), "<h3>Three</h3>")

    def test_heading_then_paragraph(self):
        self.assertEqual(to_storage("## Sub\n\ntext"), "<h2>Sub</h2>\n<p>text</p>")

    def test_inline_formatting(self):
        result = to_storage("Some **bold** and *it* and `code`")
        self.assertEqual(result, "<p>Some <strong>bold</strong> and <em>it</em> and <code>code</code></p>")

    def test_fenced_body_is_not_touched_by_inline_rules(self):
        result = to_storage("```js\nconst a = `x` ** 2 * 3;\n```")
        self.assertEqual(result, macro("js", "const a = `x` ** 2 * 3;"))

    def test_fence_without_language(self):
        self.assertEqual(to_storage("```\nx = 1\n```"), macro("none", "x = 1"))

    def test_fence_body_with_blank_line_stays_in_payload(self):
        result = to_storage("```py\na = 1\n\nb = 2\n```")
        self.assertEqual(result, macro("py", "a = 1\n\nb = 2"))

    def test_cdata_terminator_in_body_is_escaped(self):
        result = to_storage("```\nx = a[b[0]]>1\n```")

        self.assertIn("]]]]><![CDATA[>", result)
        self.assertEqual(storage_problems(result), [])
        self.assertIn("x = a[b[0]]>1", storage_text(result))

    def test_heading_pass_runs_inside_fences(self):
        # headings are converted before fences are found, so comment lines change too
        result = to_storage("```python\n# comment\nx = 1\n```")
        self.assertEqual(result, macro("python", "<h1>comment</h1>\nx = 1"))

    def test_literal_placeholder_text_is_kept(self):
        self.assertEqual(
            to_storage("See <docsync-code-3/> for details"),
            "<p>See <docsync-code-3/> for details</p>",
        )

    def test_literal_placeholder_text_next_to_fence(self):
        result = to_storage("<docsync-code-0/>\n\n```\nsecret body\n```")

        self.assertEqual(result, "<docsync-code-0/>\n" + macro("none", "secret body"))
        self.assertEqual(result.count("secret body"), 1)

    def test_bullets_are_wrapped_in_list(self):
        self.assertEqual(to_storage("- a\n- b"), "<ul><li>a</li>\n<li>b</li></ul>")

    def test_numbered_items_are_left_unwrapped(self):
        # no <ol> container, unlike bullets
        self.assertEqual(to_storage("1. one\n2. two"), "<li>one</li>\n<li>two</li>")

    def test_paragraphs_split_on_blank_lines(self):
        self.assertEqual(to_storage("para one\n\npara two"), "<p>para one</p>\n<p>para two</p>")

    def test_extracted_markup_is_well_formed(self):
        markup = (
            "Hello\nWorld\n\n---\n## Full Code\n```\n"
            "/** Hello\n * World\n */\nfunction f(){}\n```"
        )

        result = to_storage(markup)

        self.assertEqual(storage_problems(result), [])
        text = storage_text(result)
        self.assertIn("Hello\nWorld", text)
        self.assertIn("/** Hello\n * World\n */\nfunction f(){}", text)

    def test_malformed_body_is_reported(self):
        self.assertNotEqual(storage_problems("<p>a < b</p>"), [])


if __name__ == "__main__":
    unittest.main()
