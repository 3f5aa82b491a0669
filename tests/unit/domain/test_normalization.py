# tests/unit/domain/test_normalization.py
"""
测试文本归一化与内容摘要。
"""

import pytest

from trans_batch.domain.normalization import (
    content_digest,
    normalize_text,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Hello World", "hello world"),
        ("  Hello \n\n\tWorld  ", "hello world"),
        ("ÄPFEL und Birnen", "äpfel und birnen"),
        ("", ""),
        (" \n ", ""),
    ],
)
def test_normalize_text(raw, expected):
    assert normalize_text(raw) == expected


def test_whitespace_and_case_only_differences_normalize_equal():
    assert normalize_text("Installation Guide\nStep 1") == normalize_text(
        "installation   guide step 1"
    )
    assert normalize_text("Step 1") != normalize_text("Step 2")


def test_content_digest_is_stable_sha256():
    digest = content_digest("hello world")
    assert digest == content_digest(normalize_text("Hello   World"))
    assert len(digest) == 64
    assert digest != content_digest("hello world!")
