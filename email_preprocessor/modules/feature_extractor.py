"""
Feature Extraction Module
Turns a canonical EmailRecord into model-ready features

Features:
- Tag sequence: every opening tag of the HTML body, numbered in document order
- Markdown: the HTML body rendered as markdown (or the plain body as-is)
- Context: "sender subject markdown" with whitespace collapsed, plus a copy
  clipped to the model's input length

Everything here is a pure function of the record. The only state is the
markdown converter, built once per extractor and never mutated.
"""

import logging
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Dict, List, Mapping, Sequence

from bs4 import BeautifulSoup
from markdownify import ATX, ATX_CLOSED, UNDERLINED, MarkdownConverter

from .email_record import EmailRecord


logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTEXT_LENGTH = 512

# Elements whose content never reaches the rendered markdown
DEFAULT_STRIP_TAGS = ("head", "script", "style")

HEADING_STYLES = {
    "ATX": ATX,
    "ATX_CLOSED": ATX_CLOSED,
    "UNDERLINED": UNDERLINED,
    "SETEXT": UNDERLINED,
}

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class TagAttribute:
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class TagOccurrence:
    """One opening tag, with its position among all opening tags of the document"""
    tag: str
    position: int
    attributes: List[TagAttribute] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "position": self.position,
            "attributes": [a.to_dict() for a in self.attributes],
        }


@dataclass
class MetaFeatures:
    context: str
    truncated_context: str


@dataclass
class FeatureSet:
    """
    Features derived from one EmailRecord

    Attributes:
        tag_sequence: Opening tags of body.html, empty when there is no HTML
        markdown: Markdown rendering of body.html, or body.plain verbatim
        sender: Copied from the record
        subject: Copied from the record
        context: Whitespace-canonicalized "sender subject markdown"
        truncated_context: context clipped to the maximum context length
    """
    tag_sequence: List[TagOccurrence]
    markdown: str
    sender: str
    subject: str
    context: str
    truncated_context: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tagSequence": [t.to_dict() for t in self.tag_sequence],
            "markdown": self.markdown,
            "sender": self.sender,
            "subject": self.subject,
            "context": self.context,
            "truncatedContext": self.truncated_context,
        }


class _TagSequenceParser(HTMLParser):
    """
    Records opening tags as they stream past

    Self-closing tags arrive through HTMLParser.handle_startendtag, which
    forwards to handle_starttag, so they are counted exactly once.

    Stray end tags such as ``</p>`` or ``</br>`` with no matching start tag
    produce no occurrence. Browser-style tokenizers report an implied
    opening tag for them, so sequences from such tokenizers can be longer.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.sequence: List[TagOccurrence] = []

    def handle_starttag(self, tag, attrs):
        attributes: List[TagAttribute] = []
        seen = set()
        for name, value in attrs:
            # First occurrence of a repeated attribute wins, as in the DOM
            if name in seen:
                continue
            seen.add(name)
            attributes.append(TagAttribute(name=name, value=value if value is not None else ""))

        self.sequence.append(TagOccurrence(
            tag=tag,
            position=len(self.sequence),
            attributes=attributes,
        ))


def extract_tag_sequence(html: str) -> List[TagOccurrence]:
    """
    Capture every opening tag of an HTML document in document order

    Positions start at 0 and increase by one per tag regardless of nesting.

    Example:
        >>> [t.tag for t in extract_tag_sequence("<div>a <b>b</b><br/></div>")]
        ['div', 'b', 'br']
    """
    if not html:
        return []

    parser = _TagSequenceParser()
    parser.feed(html)
    parser.close()
    return parser.sequence


def canonicalize_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines and tabs included) to one space and trim"""
    return _WHITESPACE_RUN.sub(" ", text).strip()


class FeatureExtractor:
    """Extracts a FeatureSet from an EmailRecord"""

    def __init__(
        self,
        max_context_length: int = DEFAULT_MAX_CONTEXT_LENGTH,
        heading_style: str = "ATX",
        strip_tags: Sequence[str] = DEFAULT_STRIP_TAGS
    ):
        """
        Args:
            max_context_length: Length truncated_context is clipped to
            heading_style: Markdown heading style (ATX, ATX_CLOSED, UNDERLINED)
            strip_tags: Elements dropped together with their content before rendering
        """
        if max_context_length <= 0:
            raise ValueError("max_context_length must be positive")
        if heading_style.upper() not in HEADING_STYLES:
            raise ValueError(f"Unknown heading style: {heading_style}")

        self.max_context_length = max_context_length
        self.strip_tags = tuple(strip_tags)
        self.converter = MarkdownConverter(heading_style=HEADING_STYLES[heading_style.upper()])

    def extract_tag_sequence(self, record: EmailRecord) -> List[TagOccurrence]:
        return extract_tag_sequence(record.body.html)

    def extract_markdown(self, record: EmailRecord) -> str:
        """Render body.html as markdown; without HTML, body.plain is returned untouched"""
        if not record.body.html:
            return record.body.plain

        soup = BeautifulSoup(record.body.html, "html.parser")
        if self.strip_tags:
            for element in soup.find_all(list(self.strip_tags)):
                element.decompose()

        return self.converter.convert_soup(soup).strip()

    def extract_meta_features(self, features: Mapping[str, str]) -> MetaFeatures:
        """
        Build the model context from sender, subject and markdown

        Args:
            features: Mapping with "sender", "subject" and "markdown" keys
        """
        raw_context = f"{features['sender']} {features['subject']} {features['markdown']}"
        context = canonicalize_whitespace(raw_context)

        if len(context) > self.max_context_length:
            truncated = context[:self.max_context_length]
        else:
            truncated = context

        return MetaFeatures(context=context, truncated_context=truncated)

    def extract(self, record: EmailRecord) -> FeatureSet:
        """Main entry point: extract every feature from a record"""
        tag_sequence = self.extract_tag_sequence(record)
        markdown = self.extract_markdown(record)
        meta = self.extract_meta_features({
            "sender": record.sender,
            "subject": record.subject,
            "markdown": markdown,
        })

        logger.debug(
            "Extracted %d tags, context length %d",
            len(tag_sequence),
            len(meta.context),
        )

        return FeatureSet(
            tag_sequence=tag_sequence,
            markdown=markdown,
            sender=record.sender,
            subject=record.subject,
            context=meta.context,
            truncated_context=meta.truncated_context,
        )
