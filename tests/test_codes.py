import re

import pytest

from clubcert.shared.codes import (
    build_validation_url,
    generate_validation_code,
    to_base36,
)

CODE_RE = re.compile(r"^CERT-[0-9A-Z]+-[0-9A-Z]{4}$")


def test_code_format():
    for _ in range(20):
        assert CODE_RE.match(generate_validation_code())


def test_code_embeds_base36_timestamp():
    code = generate_validation_code(timestamp_ms=1_700_000_000_000)
    assert code.startswith(f"CERT-{to_base36(1_700_000_000_000)}-")
    assert code == code.upper()


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (9, "9"), (10, "A"), (35, "Z"), (36, "10"), (1295, "ZZ"), (46656, "1000")],
)
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_validation_url():
    assert (
        build_validation_url("https://club.example.com/", "CERT-1-ABCD")
        == "https://club.example.com/verify/cert/CERT-1-ABCD"
    )
    assert (
        build_validation_url("http://localhost:5173", "CERT-1-ABCD")
        == "http://localhost:5173/verify/cert/CERT-1-ABCD"
    )
