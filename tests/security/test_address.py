"""Tests for forwarded-for and remote address validation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from ghwebhook.errors import UntrustedAddressError
from ghwebhook.security.address import AddressValidator, split_host_port
from ghwebhook.security.trust import TrustedRanges, parse_cidrs


def _validator(*cidrs: str) -> AddressValidator:
    expires = datetime.now(UTC) + timedelta(hours=1)
    return AddressValidator(TrustedRanges(tuple(parse_cidrs(cidrs)), expires))


class TestSplitHostPort:
    @pytest.mark.parametrize(
        ("addr", "host"),
        [
            ("1.2.3.4:8080", "1.2.3.4"),
            ("1.2.3.4", "1.2.3.4"),
            ("[::1]:443", "::1"),
            ("::1", "::1"),
            ("2a0a:a440::1", "2a0a:a440::1"),
            ("", ""),
        ],
    )
    def test_split(self, addr: str, host: str) -> None:
        assert split_host_port(addr) == host


class TestValidate:
    def test_trusted_forwarded_and_remote(self) -> None:
        _validator("1.2.3.0/24").validate("1.2.3.9", "1.2.3.4")

    def test_untrusted_forwarded(self) -> None:
        with pytest.raises(UntrustedAddressError):
            _validator("1.2.3.0/24").validate("1.2.3.9", "9.9.9.9")

    def test_every_hop_must_be_trusted(self) -> None:
        validator = _validator("1.2.3.0/24", "10.0.0.0/8")
        validator.validate("10.0.0.1", "1.2.3.4, 10.0.0.2")
        with pytest.raises(UntrustedAddressError, match="9.9.9.9"):
            validator.validate("10.0.0.1", "9.9.9.9, 1.2.3.4")
        with pytest.raises(UntrustedAddressError):
            validator.validate("10.0.0.1", "1.2.3.4, 9.9.9.9")

    def test_unparsable_hop(self) -> None:
        with pytest.raises(UntrustedAddressError):
            _validator("1.2.3.0/24").validate("1.2.3.9", "1.2.3.4, unknown")

    def test_empty_hop_in_header(self) -> None:
        with pytest.raises(UntrustedAddressError):
            _validator("1.2.3.0/24").validate("1.2.3.9", "1.2.3.4, ")

    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_absent_header_checks_remote_only(self, header: str | None) -> None:
        _validator("1.2.3.0/24").validate("1.2.3.9", header)

    def test_untrusted_remote(self) -> None:
        with pytest.raises(UntrustedAddressError, match="remote"):
            _validator("1.2.3.0/24").validate("9.9.9.9", "1.2.3.4")

    def test_remote_with_port(self) -> None:
        validator = _validator("127.0.0.0/8", "::1/128")
        validator.validate("127.0.0.1:54321")
        validator.validate("[::1]:54321")

    def test_missing_remote(self) -> None:
        with pytest.raises(UntrustedAddressError):
            _validator("0.0.0.0/0").validate(None, "1.2.3.4")

    def test_empty_ranges_reject_everything(self) -> None:
        with pytest.raises(UntrustedAddressError):
            AddressValidator(TrustedRanges()).validate("127.0.0.1")
