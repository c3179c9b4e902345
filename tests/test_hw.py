import io

import pytest

from esetools.hw import (
    Hardware,
    SecureElement,
    SecureElementError,
    find_supported_hardware,
    format_supported_hardware,
    print_supported_hardware,
)

TABLE = (
    Hardware("nq-nci", "ESE_HW_NXP_PN80T_NQ_NCI_ops", "libese-hw-nxp-pn80t-nq-nci.so"),
    Hardware("fake", "ESE_HW_FAKE_ops", "libese-hw-fake.so"),
    Hardware("echo", "ESE_HW_ECHO_ops", "libese-hw-echo.so"),
)


def test_find_supported_hardware():
    assert find_supported_hardware(TABLE, "fake") is TABLE[1]
    assert find_supported_hardware(TABLE, "echo").lib == "libese-hw-echo.so"


def test_find_unknown_hardware_raises():
    with pytest.raises(KeyError):
        find_supported_hardware(TABLE, "missing")


def test_find_returns_first_match():
    table = (Hardware("a", "s1", "l1"), Hardware("a", "s2", "l2"))
    assert find_supported_hardware(table, "a").sym == "s1"


def test_format_supported_hardware():
    text = format_supported_hardware(TABLE[1:2])
    assert text == "Supported hardware:\n\tfake\t(ESE_HW_FAKE_ops / libese-hw-fake.so)\n"


def test_format_lists_every_entry():
    lines = format_supported_hardware(TABLE).splitlines()
    assert len(lines) == 1 + len(TABLE)
    assert [line.split("\t")[1] for line in lines[1:]] == [hw.name for hw in TABLE]


def test_print_supported_hardware_writes_table():
    out = io.StringIO()
    print_supported_hardware(TABLE, out)
    assert out.getvalue() == format_supported_hardware(TABLE)


def test_transceive_requires_open():
    element = SecureElement()
    with pytest.raises(SecureElementError):
        element.transceive(b"\x00", 16)


def test_transceive_round_trip_after_open():
    element = SecureElement()
    element.open({"slot": 1})
    assert element.options == {"slot": 1}
    assert element.transceive(bytes.fromhex("00A4040000"), 64) == bytes.fromhex("00A4040000")


def test_transceive_reply_too_long():
    element = SecureElement()
    element.open()
    with pytest.raises(SecureElementError) as info:
        element.transceive(bytes(10), 4)
    assert "4" in info.value.message


def test_double_open_raises():
    element = SecureElement()
    element.open()
    with pytest.raises(SecureElementError):
        element.open()


def test_context_manager_closes():
    with SecureElement() as element:
        element.open()
        assert element.is_open
    assert not element.is_open
    with pytest.raises(SecureElementError):
        element.hw_reset()


def test_hw_reset_counts():
    element = SecureElement()
    element.open()
    element.hw_reset()
    element.hw_reset()
    assert element.reset_count == 2


def test_error_carries_code_and_message():
    error = SecureElementError("broken", code=7)
    assert (error.code, error.message, str(error)) == (7, "broken", "broken")