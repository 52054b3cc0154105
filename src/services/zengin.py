"""Zengin (全銀) general transfer file encoder.

A Zengin file is a sequence of fixed-length 120-byte records separated by CRLF
and encoded in Shift_JIS:

- header  (``1``): sender code/name, transfer date, sender bank/branch
- data    (``2``): one per transfer, recipient bank/branch/account and amount
- trailer (``8``): record count and total amount
- end     (``9``): end-of-file marker

Field widths are byte widths in the target charset, so a full-width character
occupies two bytes. Values that do not fit are rejected with ``EncodingError``
instead of being cut, because a shifted column corrupts every following field.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
import re

from src.errors import EncodingError

RECORD_LENGTH = 120
CHARSET = "shift_jis"
LINE_SEPARATOR = "\r\n"

CLASSIFICATION_GENERAL_TRANSFER = "21"
ACCOUNT_TYPES = frozenset({"1", "2", "4", "9"})  # 普通, 当座, 貯蓄, その他

_DIGITS = re.compile(r"[0-9]*")


@dataclass(frozen=True)
class SenderProfile:
    sender_code: str
    sender_name: str
    transfer_date: date
    bank_code: str
    branch_code: str


@dataclass(frozen=True)
class TransferRecord:
    recipient_name: str
    bank_code: str
    branch_code: str
    account_type: str
    account_number: str
    amount: int


def _byte_length(value: str, *, field: str) -> int:
    try:
        return len(value.encode(CHARSET))
    except UnicodeEncodeError as exc:
        raise EncodingError(field, f"contains characters that cannot be encoded in {CHARSET}") from exc


def text_field(value: str, width: int, *, field: str) -> str:
    """Left-aligned text, space-padded to ``width`` bytes."""

    size = _byte_length(value, field=field)
    if size > width:
        raise EncodingError(field, f"is {size} bytes, exceeds fixed width {width}")
    return value + " " * (width - size)


def numeric_field(value: str, width: int, *, field: str) -> str:
    """Right-aligned ASCII digits, zero-padded to ``width``."""

    if not _DIGITS.fullmatch(value):
        raise EncodingError(field, f"must contain only digits, got {value!r}")
    if len(value) > width:
        raise EncodingError(field, f"has {len(value)} digits, exceeds fixed width {width}")
    return value.rjust(width, "0")


def amount_field(value: int, width: int, *, field: str) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(field, "must be an integer")
    if value < 0:
        raise EncodingError(field, "must not be negative")
    return numeric_field(str(value), width, field=field)


def blank(width: int) -> str:
    return " " * width


class ZenginFileEncoder:
    """Pure renderer: no I/O, either a complete buffer or an exception."""

    def build_header_record(self, sender: SenderProfile) -> str:
        parts = [
            "1",
            CLASSIFICATION_GENERAL_TRANSFER,
            "0",  # code classification: Shift_JIS
            text_field(sender.sender_code, 10, field="sender_code"),
            text_field(sender.sender_name, 40, field="sender_name"),
            sender.transfer_date.strftime("%m%d"),
            numeric_field(sender.bank_code, 4, field="sender_bank_code"),
            blank(15),  # bank name
            numeric_field(sender.branch_code, 3, field="sender_branch_code"),
            blank(15),  # branch name
            "1",  # account type
            numeric_field("", 7, field="sender_account_number"),
        ]
        return self._finish("".join(parts), record="header")

    def build_data_record(self, record: TransferRecord, *, index: int = 0) -> str:
        prefix = f"records[{index}]"
        if record.account_type not in ACCOUNT_TYPES:
            raise EncodingError(f"{prefix}.account_type", f"must be one of {sorted(ACCOUNT_TYPES)}")

        parts = [
            "2",
            numeric_field(record.bank_code, 4, field=f"{prefix}.bank_code"),
            blank(15),  # bank name
            numeric_field(record.branch_code, 3, field=f"{prefix}.branch_code"),
            blank(15),  # branch name
            "0000",  # clearing house
            record.account_type,
            numeric_field(record.account_number, 7, field=f"{prefix}.account_number"),
            text_field(record.recipient_name, 30, field=f"{prefix}.recipient_name"),
            amount_field(record.amount, 10, field=f"{prefix}.amount"),
            "0",  # new code
            blank(20),  # EDI info
        ]
        return self._finish("".join(parts), record=f"{prefix} data")

    def build_trailer_record(self, total_count: int, total_amount: int) -> str:
        parts = [
            "8",
            amount_field(total_count, 6, field="trailer.total_count"),
            amount_field(total_amount, 12, field="trailer.total_amount"),
        ]
        return self._finish("".join(parts), record="trailer")

    def build_end_record(self) -> str:
        return self._finish("9", record="end")

    def render(self, sender: SenderProfile, records: Sequence[TransferRecord]) -> str:
        lines = [self.build_header_record(sender)]

        total_amount = 0
        for index, record in enumerate(records):
            lines.append(self.build_data_record(record, index=index))
            total_amount += record.amount

        lines.append(self.build_trailer_record(len(records), total_amount))
        lines.append(self.build_end_record())
        return LINE_SEPARATOR.join(lines)

    def encode(self, sender: SenderProfile, records: Sequence[TransferRecord]) -> bytes:
        content = self.render(sender, records)
        try:
            return content.encode(CHARSET)
        except UnicodeEncodeError as exc:  # pragma: no cover - fields are checked individually
            raise EncodingError("file", f"cannot be encoded in {CHARSET}") from exc

    @staticmethod
    def _finish(body: str, *, record: str) -> str:
        size = _byte_length(body, field=record)
        if size > RECORD_LENGTH:
            raise EncodingError(record, f"is {size} bytes, exceeds record length {RECORD_LENGTH}")
        return body + " " * (RECORD_LENGTH - size)
