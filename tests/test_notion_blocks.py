import unittest

from transform.content_blocks import BlockType, ContentBlock, RICH_TEXT_LIMIT
from transform.notion_blocks import flatten_text, to_blocks, to_notion_children


class TestMarkupToBlocks(unittest.TestCase):

    def test_headings_paragraphs_and_code(self):
        markup = (
            "Hello\nWorld\n\n---\n## Full Code\n```\n"
            "/** Hello\n * World\n */\nfunction f(){}\n```"
        )

        blocks = to_blocks(markup, "javascript")

        self.assertEqual(blocks, [
            ContentBlock.paragraph("Hello"),
            ContentBlock.paragraph("World"),
            ContentBlock.paragraph("---"),
            ContentBlock.heading(2, "Full Code"),
            ContentBlock.code("javascript", "/** Hello\n * World\n */\nfunction f(){}"),
        ])

    def test_heading_level_is_clamped(self):
        blocks = to_blocks("##### Deep", "python")

        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].type, BlockType.HEADING)
        self.assertEqual(blocks[0].level, 3)
        self.assertEqual(blocks[0].text, "Deep")

    def test_fence_language_hint_is_ignored(self):
        blocks = to_blocks("```rust\nfn main() {}\n```", "python")
        self.assertEqual(blocks, [ContentBlock.code("python", "fn main() {}")])

    def test_blank_lines_inside_fence_are_kept(self):
        blocks = to_blocks("```\na\n\nb\n```", "c")
        self.assertEqual(blocks[0].text, "a\n\nb")

    def test_markup_inside_fence_is_literal(self):
        blocks = to_blocks("```\n# not a heading\n```", "python")
        self.assertEqual(blocks, [ContentBlock.code("python", "# not a heading")])

    def test_unterminated_fence_is_flushed(self):
        blocks = to_blocks("intro\n```\na\nb", "java")
        self.assertEqual(blocks, [ContentBlock.paragraph("intro"), ContentBlock.code("java", "a\nb")])

    def test_empty_fence_emits_nothing(self):
        self.assertEqual(to_blocks("```\n```", "java"), [])

    def test_each_line_is_its_own_paragraph(self):
        blocks = to_blocks("first line\n  second line\n\n", "c")
        self.assertEqual(blocks, [
            ContentBlock.paragraph("first line"),
            ContentBlock.paragraph("  second line"),
        ])

    def test_text_is_preserved_when_flattened(self):
        markup = (
            "# Title\n\nSome **bold** text\n- item one\n1. numbered\n\n"
            "```python\ndef f():\n    return `x`\n```\n### Notes\nlast line"
        )

        flat = flatten_text(to_blocks(markup, "python"))

        for text in ("Title", "Some **bold** text", "- item one", "1. numbered",
                     "def f():", "    return `x`", "Notes", "last line"):
            self.assertIn(text, flat)


class TestNotionWireShape(unittest.TestCase):

    def test_heading_shape(self):
        children = to_notion_children([ContentBlock.heading(2, "Usage")])

        self.assertEqual(children, [{
            "object": "block",
            "type": "heading_2",
            "heading_2": {"rich_text": [{"type": "text", "text": {"content": "Usage"}}]},
        }])

    def test_code_shape_maps_language(self):
        block = ContentBlock.code("cpp", "int main() {}").to_notion()

        self.assertEqual(block["type"], "code")
        self.assertEqual(block["code"]["language"], "c++")
        self.assertEqual(block["code"]["rich_text"][0]["text"]["content"], "int main() {}")

    def test_long_text_is_split_into_segments(self):
        text = "x" * (RICH_TEXT_LIMIT * 2 + 500)

        rich = ContentBlock.paragraph(text).to_notion()["paragraph"]["rich_text"]

        self.assertEqual(len(rich), 3)
        self.assertTrue(all(len(r["text"]["content"]) <= RICH_TEXT_LIMIT for r in rich))
        self.assertEqual("".join(r["text"]["content"] for r in rich), text)


if __name__ == "__main__":
    unittest.main()
