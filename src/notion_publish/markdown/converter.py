"""Convert Notion block trees to markdown."""

import logging
from typing import Any, Dict, List

from ..upstream.base import BlockSource, MdBlock
from ..upstream.properties import plain_text

logger = logging.getLogger(__name__)

LIST_BLOCKS = frozenset({"bulleted_list_item", "numbered_list_item", "to_do"})

# Blocks whose children are other pages, not content of this page
PAGE_BLOCKS = frozenset({"child_page", "child_database"})

INDENT = "    "


def annotate(text: str, annotations: Dict[str, Any]) -> str:
    """
    Wrap text in markdown markers for its annotations.

    Surrounding whitespace stays outside the markers, since CommonMark
    does not close emphasis after a space. Whitespace-only text is
    returned unchanged.
    """
    core = text.strip()
    if not core:
        return text
    leading = text[: len(text) - len(text.lstrip())]
    trailing = text[len(text.rstrip()):]

    if annotations.get("code"):
        core = f"`{core}`"
    if annotations.get("bold"):
        core = f"**{core}**"
    if annotations.get("italic"):
        core = f"*{core}*"
    if annotations.get("strikethrough"):
        core = f"~~{core}~~"

    return f"{leading}{core}{trailing}"


def rich_text_to_markdown(rich_text: List[Dict[str, Any]]) -> str:
    """Render a rich text array with its annotations and links."""
    parts = []
    for text_obj in rich_text or []:
        if text_obj.get("type") == "equation":
            parts.append(f"${text_obj['equation'].get('expression', '')}$")
            continue

        text = text_obj.get("plain_text", "")
        if not text:
            continue
        text = annotate(text, text_obj.get("annotations", {}))

        href = text_obj.get("href")
        if href:
            text = f"[{text}]({href})"

        parts.append(text)

    return "".join(parts)


def _indent(text: str, level: int) -> str:
    if level <= 0:
        return text
    prefix = INDENT * level
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def _file_url(content: Dict[str, Any]) -> str:
    kind = content.get("type", "external")
    return content.get(kind, {}).get("url", "")


class NotionToMarkdown:
    """Fetches a page's blocks and renders them as markdown."""

    def __init__(self, source: BlockSource):
        self.source = source

    async def page_to_markdown(self, page_id: str) -> List[MdBlock]:
        """
        Fetch the block tree of a page and render every block.

        Args:
            page_id: Page ID

        Returns:
            Rendered blocks in document order, children attached
        """
        return await self._render_children(page_id)

    async def _render_children(self, block_id: str) -> List[MdBlock]:
        blocks = await self.source.list_block_children(block_id)

        rendered = []
        number = 0
        for block in blocks:
            kind = block.get("type", "")
            number = number + 1 if kind == "numbered_list_item" else 0

            children: List[MdBlock] = []
            if kind == "table":
                rows = await self.source.list_block_children(block["id"])
                parent = self.table_to_markdown(block.get("table", {}), rows)
            else:
                parent = self.block_to_markdown(block, number=number or 1)
                if block.get("has_children") and kind not in PAGE_BLOCKS:
                    children = await self._render_children(block["id"])

            rendered.append(
                MdBlock(type=kind, block_id=block["id"], parent=parent, children=children)
            )

        return rendered

    def block_to_markdown(self, block: Dict[str, Any], number: int = 1) -> str:
        """Render one block without its children."""
        kind = block.get("type", "")
        content = block.get(kind) or {}

        convert = getattr(self, f"_convert_{kind}", None)
        if convert is None:
            logger.debug(f"No markdown for block type '{kind}' ({block.get('id')})")
            return ""
        if kind == "numbered_list_item":
            return convert(content, number)
        return convert(content)

    def table_to_markdown(
        self, table: Dict[str, Any], rows: List[Dict[str, Any]]
    ) -> str:
        """Render a table; the first row is always used as the header."""
        cells = [
            [rich_text_to_markdown(cell) for cell in row.get("table_row", {}).get("cells", [])]
            for row in rows
            if row.get("type") == "table_row"
        ]
        if not cells:
            return ""

        width = table.get("table_width") or max(len(row) for row in cells)
        cells = [row + [""] * (width - len(row)) for row in cells]

        lines = ["| " + " | ".join(cells[0]) + " |"]
        lines.append("| " + " | ".join(["---"] * width) + " |")
        for row in cells[1:]:
            lines.append("| " + " | ".join(row) + " |")
        return "\n".join(lines)

    def to_markdown_string(self, blocks: List[MdBlock], nesting_level: int = 0) -> str:
        """
        Join rendered blocks into one markdown document.

        List items are separated by single newlines and their children are
        indented one level; toggle children are wrapped in a details element.
        """
        out = []
        previous = None
        for block in blocks:
            if previous in LIST_BLOCKS and block.type not in LIST_BLOCKS:
                out.append("\n")
            previous = block.type

            if block.type == "toggle":
                inner = self.to_markdown_string(block.children).strip()
                details = f"<details>\n<summary>{block.parent}</summary>\n\n{inner}\n\n</details>"
                out.append(_indent(details, nesting_level) + "\n\n")
                continue

            if block.parent:
                separator = "\n" if block.type in LIST_BLOCKS else "\n\n"
                out.append(_indent(block.parent, nesting_level) + separator)

            if block.children:
                level = nesting_level + 1 if block.type in LIST_BLOCKS else nesting_level
                out.append(self.to_markdown_string(block.children, level))

        return "".join(out)

    # Block type converters

    def _convert_paragraph(self, content: Dict) -> str:
        return rich_text_to_markdown(content.get("rich_text", []))

    def _convert_heading_1(self, content: Dict) -> str:
        return f"# {rich_text_to_markdown(content.get('rich_text', []))}"

    def _convert_heading_2(self, content: Dict) -> str:
        return f"## {rich_text_to_markdown(content.get('rich_text', []))}"

    def _convert_heading_3(self, content: Dict) -> str:
        return f"### {rich_text_to_markdown(content.get('rich_text', []))}"

    def _convert_bulleted_list_item(self, content: Dict) -> str:
        return f"- {rich_text_to_markdown(content.get('rich_text', []))}"

    def _convert_numbered_list_item(self, content: Dict, number: int = 1) -> str:
        return f"{number}. {rich_text_to_markdown(content.get('rich_text', []))}"

    def _convert_to_do(self, content: Dict) -> str:
        checkbox = "[x]" if content.get("checked") else "[ ]"
        return f"- {checkbox} {rich_text_to_markdown(content.get('rich_text', []))}"

    def _convert_quote(self, content: Dict) -> str:
        text = rich_text_to_markdown(content.get("rich_text", []))
        return "\n".join(f"> {line}" for line in text.split("\n"))

    def _convert_callout(self, content: Dict) -> str:
        icon = (content.get("icon") or {}).get("emoji", "")
        text = rich_text_to_markdown(content.get("rich_text", []))
        if icon:
            text = f"{icon} {text}"
        return "\n".join(f"> {line}" for line in text.split("\n"))

    def _convert_code(self, content: Dict) -> str:
        language = content.get("language", "")
        if language == "plain text":
            language = "text"
        text = plain_text(content.get("rich_text", []))
        return f"```{language}\n{text}\n```"

    def _convert_equation(self, content: Dict) -> str:
        return f"$$\n{content.get('expression', '')}\n$$"

    def _convert_divider(self, content: Dict) -> str:
        return "---"

    def _convert_image(self, content: Dict) -> str:
        caption = plain_text(content.get("caption", []))
        return f"![{caption or 'image'}]({_file_url(content)})"

    def _link(self, content: Dict, default: str, url: str) -> str:
        caption = plain_text(content.get("caption", []))
        return f"[{caption or default}]({url})"

    def _convert_video(self, content: Dict) -> str:
        return self._link(content, "video", _file_url(content))

    def _convert_file(self, content: Dict) -> str:
        url = _file_url(content)
        return self._link(content, content.get("name") or "file", url)

    def _convert_pdf(self, content: Dict) -> str:
        return self._link(content, "pdf", _file_url(content))

    def _convert_bookmark(self, content: Dict) -> str:
        url = content.get("url", "")
        return self._link(content, url, url)

    def _convert_embed(self, content: Dict) -> str:
        url = content.get("url", "")
        return self._link(content, url, url)

    def _convert_link_preview(self, content: Dict) -> str:
        url = content.get("url", "")
        return f"[{url}]({url})"

    def _convert_toggle(self, content: Dict) -> str:
        return rich_text_to_markdown(content.get("rich_text", []))

    def _convert_child_page(self, content: Dict) -> str:
        return f"## {content.get('title', '')}"

    def _convert_column_list(self, content: Dict) -> str:
        return ""

    _convert_column = _convert_column_list
