"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text
that continues here.

> Quoted *text*
lazily continued
> > nested quote

Setext title
============

```python
print("hello")
```

    indented code

Footer paragraph.
"""


@pytest.fixture(name="md")
def md_fixture():
    return MarkdownIt("commonmark")


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD
