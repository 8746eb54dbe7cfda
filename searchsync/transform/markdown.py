"""Markdown to plain text conversion for long text fields."""

import re

import markdown
from bs4 import BeautifulSoup


def preprocess_text(text: str) -> str:
    """Clean up extracted text: collapse blank lines and runs of spaces."""
    text = re.sub(r'\n{3,}', '\n\n', text)
    text = re.sub(r'[^\S\n\f]+', ' ', text)
    return text.strip()


def markdown_to_text(source: str) -> str:
    """
    Convert markdown source to plain text.

    The markdown is rendered to HTML and the text content is extracted, so
    emphasis, headings, links and code markers disappear while the words
    they wrap are kept.
    """
    if not source:
        return ""
    html = markdown.markdown(str(source))
    soup = BeautifulSoup(html, 'html.parser')
    return preprocess_text(soup.get_text())
