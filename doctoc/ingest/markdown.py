from __future__ import annotations

import re
from dataclasses import dataclass, field
from re import Match, Pattern
from typing import List, NoReturn, Optional, Tuple

from doctoc.common.build_logger import BuildLogger
from doctoc.common.errors import ErrorCodes
from doctoc.ingest.toc_reader import TocReader
from doctoc.models.toc_item import TocItem

_CONTINUABLE_CHARACTERS = ".,;:!?~"
_STOP_CHARACTERS = r"\s\"'<>"
_HEADING_TAIL = r"( |\t)*#*( |\t)*(\n|$)"

_UID_IN_LINK = re.compile(r"^\s*(?:xref:|@)(\s*?\S+?[\s\S]*?)\s*$")


@dataclass(slots=True)
class _ParseState:
    file_path: str
    level: int = 0
    parents: List[TocItem] = field(default_factory=list)
    root: List[TocItem] = field(default_factory=list)


class ParseRule:
    """A heading-line rule; the first rule in ``PARSE_RULES`` that matches wins."""

    name: str = ""
    patterns: Tuple[Pattern[str], ...] = ()

    def match(self, text: str) -> Optional[Match[str]]:
        for pattern in self.patterns:
            found = pattern.match(text)
            if found is not None and found.end() > 0:
                return found
        return None

    def apply(self, state: _ParseState, match: Match[str], logger: BuildLogger) -> None:
        """Consume the matched text; most rules add one item to the tree."""

    @staticmethod
    def add_item(
        state: _ParseState,
        logger: BuildLogger,
        level: int,
        text: Optional[str],
        href: Optional[str],
        uid: Optional[str] = None,
        display_text: Optional[str] = None,
    ) -> None:
        if level > state.level + 1:
            _fail(state, logger, f"Skip level is not allowed. Toc content: {text}")

        # Close siblings and deeper nodes.
        for _ in range(state.level - level + 1):
            state.parents.pop()

        item = TocItem(name=text, display_name=display_text, href=href, uid=uid)
        if state.parents:
            state.parents[-1].add_child(item)
        else:
            state.root.append(item)
        state.parents.append(item)
        state.level = level


class TopicLinkRule(ParseRule):
    """``# [title](link)``, ``# [title](link "display")``, ``# [title](xref:uid)``, ``# [title](@uid)``."""

    name = "topic"
    patterns = (
        re.compile(
            r"^(?P<headerLevel>#+)(( |\t)*)\[(?P<tocTitle>.+)\]\((?P<tocLink>(?!http[s]?://).*?)"
            r"(\)| \"(?P<displayText>.*)\"\))(?:( |\t)+#*)?( |\t)*(\n|$)"
        ),
    )

    def apply(self, state: _ParseState, match: Match[str], logger: BuildLogger) -> None:
        link = match.group("tocLink")
        title = match.group("tocTitle")
        level = len(match.group("headerLevel"))
        display_text = match.group("displayText")

        uid_match = _UID_IN_LINK.match(link)
        if uid_match is not None and uid_match.end() > 0:
            self.add_item(state, logger, level, title, None, uid_match.group(1), display_text)
        else:
            self.add_item(state, logger, level, title, link, None, display_text)


class ExternalLinkRule(ParseRule):
    name = "external_link"
    patterns = (
        re.compile(
            r"^(?P<headerLevel>#+)(( |\t)*)\[(?P<tocTitle>.+?)\]\((?P<tocLink>(http[s]?://).*?)\)"
            r"(?:( |\t)+#*)?( |\t)*(\n|$)"
        ),
    )

    def apply(self, state: _ParseState, match: Match[str], logger: BuildLogger) -> None:
        self.add_item(state, logger, len(match.group("headerLevel")), match.group("tocTitle"), match.group("tocLink"))


class XrefAutoLinkRule(ParseRule):
    """``# <xref:uid>`` and ``# <xref:"uid with spaces">``."""

    name = "xref_autolink"
    patterns = (
        re.compile(r"^(?P<headerLevel>#+)(?: |\t)*<xref:(?P<quote>['\"])(?P<uid>\s*?\S+?[\s\S]*?)(?P=quote)>" + _HEADING_TAIL),
        re.compile(r"^(?P<headerLevel>#+)(?: |\t)*(<xref:(?P<uid>[^ >]+)>)" + _HEADING_TAIL),
    )

    def apply(self, state: _ParseState, match: Match[str], logger: BuildLogger) -> None:
        self.add_item(state, logger, len(match.group("headerLevel")), None, None, match.group("uid"))


class XrefShortcutRule(ParseRule):
    """``# @uid`` and ``# @"uid with spaces"``."""

    name = "xref_shortcut"
    patterns = (
        re.compile(r"^(?P<headerLevel>#+)(?: |\t)*@(?:(?P<quote>['\"])(?P<uid>\s*?\S+?[\s\S]*?)(?P=quote))" + _HEADING_TAIL),
        re.compile(
            r"^(?P<headerLevel>#+)(?: |\t)*"
            rf"@(?P<uid>[a-zA-Z](?:[{re.escape(_CONTINUABLE_CHARACTERS)}]?"
            rf"[^{_STOP_CHARACTERS}{re.escape(_CONTINUABLE_CHARACTERS)}])*)"
            + _HEADING_TAIL
        ),
    )

    def apply(self, state: _ParseState, match: Match[str], logger: BuildLogger) -> None:
        self.add_item(state, logger, len(match.group("headerLevel")), None, None, match.group("uid"))


class ContainerRule(ParseRule):
    name = "container"
    patterns = (re.compile(r"^(?P<headerLevel>#+)(( |\t)*)(?P<tocTitle>.+?)(?:( |\t)+#*)?( |\t)*(\n|$)"),)

    def apply(self, state: _ParseState, match: Match[str], logger: BuildLogger) -> None:
        self.add_item(state, logger, len(match.group("headerLevel")), match.group("tocTitle"), None)


class CommentRule(ParseRule):
    name = "comment"
    patterns = (re.compile(r"^\s*<!--[\s\S]*?-->\s*(\n|$)"),)


class WhitespaceRule(ParseRule):
    name = "whitespace"
    patterns = (re.compile(r"^\s*(\n|$)"),)


# Order matters: link rules must be tried before the generic container heading.
PARSE_RULES: Tuple[ParseRule, ...] = (
    TopicLinkRule(),
    ExternalLinkRule(),
    XrefAutoLinkRule(),
    XrefShortcutRule(),
    ContainerRule(),
    CommentRule(),
    WhitespaceRule(),
)


def _fail(state: _ParseState, logger: BuildLogger, details: str) -> NoReturn:
    logger.fatal(
        f"Invalid toc file: {state.file_path}, Details: {details}",
        ErrorCodes.INVALID_MARKDOWN_TOC,
    )


class MarkdownTocReader(TocReader):
    """Parse heading-based markdown TOC files (``toc.md``) into TocItem trees."""

    rules: Tuple[ParseRule, ...] = PARSE_RULES

    def parse(self, text: str, file_path: str) -> List[TocItem]:
        content = text.replace("\r\n", "\n").replace("\r", "\n")
        state = _ParseState(file_path=file_path)
        line_number = 1

        while content:
            for rule in self.rules:
                match = rule.match(content)
                if match is None:
                    continue
                content = content[match.end():]
                line_number += match.group(0).count("\n")
                rule.apply(state, match, self.logger)
                break
            else:
                context = "\n".join(content.split("\n")[:3])
                _fail(state, self.logger, f"Unknown syntax at line {line_number}:\n{context}")

        return state.root

    def read(self, text: str, file_path: str) -> TocItem:
        return TocItem(items=self.parse(text, file_path))


__all__ = [
    "ContainerRule",
    "CommentRule",
    "ExternalLinkRule",
    "MarkdownTocReader",
    "PARSE_RULES",
    "ParseRule",
    "TopicLinkRule",
    "WhitespaceRule",
    "XrefAutoLinkRule",
    "XrefShortcutRule",
]
