"""Document information block (``{\\info ...}``)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from rtfdoc.utilities import rtf_escape


class Information:
    """Title, author, company, comments and creation time of a document."""

    def __init__(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        company: Optional[str] = None,
        comments: Optional[str] = None,
        created: Optional[datetime] = None,
    ) -> None:
        self.title = title
        self.author = author
        self.company = company
        self.comments = comments
        self.created = created or datetime.now()

    def to_rtf(self, indent: int = 0) -> str:
        prefix = " " * indent
        lines = [f"{prefix}{{\\info"]
        for word, value in (
            ("title", self.title),
            ("author", self.author),
            ("company", self.company),
            ("doccomm", self.comments),
        ):
            if value is not None:
                lines.append(f"{prefix}{{\\{word} {rtf_escape(value)}}}")
        if self.created is not None:
            stamp = self.created
            lines.append(
                f"{prefix}{{\\creatim\\yr{stamp.year}\\mo{stamp.month}\\dy{stamp.day}"
                f"\\hr{stamp.hour}\\min{stamp.minute}}}"
            )
        lines.append(f"{prefix}}}")
        return "\n".join(lines)
