"""
Tests for Via / Contact extraction and callback address parsing.
"""

import pytest

from sip_headers import (
    CallbackAddress,
    extract_callback,
    extract_contact,
    extract_via,
    parse_callback_address,
)

REGISTER = (
    b"REGISTER sip:example.org;transport=TCP SIP/2.0\r\n"
    b"Via: SIP/2.0/TCP 10.1.1.1:5060;branch=abc;rport\r\n"
    b"Via: SIP/2.0/TCP 10.9.9.9:5060;branch=second\r\n"
    b"Contact: <sip:wuzzi@10.1.1.1:4444;transport=TCP>\r\n"
    b"Content-Length: 0\r\n"
    b"\r\n"
)


class TestExtractHeaders:

    def test_via_first_match(self):
        assert extract_via(REGISTER) == "Via: SIP/2.0/TCP 10.1.1.1:5060;branch=abc;rport"

    def test_contact(self):
        assert extract_contact(REGISTER) == "Contact: <sip:wuzzi@10.1.1.1:4444;transport=TCP>"

    def test_no_crlf_in_result(self):
        assert "\r" not in extract_via(REGISTER)
        assert "\n" not in extract_contact(REGISTER)

    def test_missing_via(self):
        assert extract_via(b"REGISTER sip:x SIP/2.0\r\nContact: <sip:a@b:1>\r\n\r\n") is None

    def test_missing_contact(self):
        assert extract_contact(b"REGISTER sip:x SIP/2.0\r\nVia: SIP/2.0/TCP a:1\r\n\r\n") is None

    def test_empty_value_is_not_found(self):
        assert extract_via(b"Via:\r\n\r\n") is None

    def test_case_sensitive_token(self):
        assert extract_contact(b"contact: <sip:a@b:1>\r\n\r\n") is None

    def test_str_input(self):
        assert extract_contact(REGISTER.decode()) == "Contact: <sip:wuzzi@10.1.1.1:4444;transport=TCP>"

    def test_token_inside_another_line(self):
        # purely syntactic: the first occurrence anywhere counts
        raw = b"X-Note: see Contact: <sip:a@1.2.3.4:9>\r\nContact: <sip:b@5.6.7.8:1>\r\n\r\n"
        assert extract_contact(raw) == "Contact: <sip:a@1.2.3.4:9>"


class TestExtractCallback:

    @pytest.mark.parametrize("hostport", [
        "127.0.0.1:5060",
        "192.168.1.20:4444",
        "nat.example.com:1",
        "[2001:db8::1]:5060",
        "host:notaport",
    ])
    def test_returns_host_port(self, hostport):
        contact = f"Contact: <sip:user@{hostport};rinstance=1;transport=TCP>"
        assert extract_callback(contact) == hostport

    def test_without_parameters_runs_to_end(self):
        assert extract_callback("Contact: <sip:user@1.2.3.4:5>") == "1.2.3.4:5>"

    def test_no_at_sign(self):
        assert extract_callback("Contact: <sip:1.2.3.4:5;transport=TCP>") is None

    def test_empty_user_part(self):
        assert extract_callback("Contact: <sip:user@;transport=TCP>") is None

    def test_bytes_input(self):
        assert extract_callback(b"Contact: <sip:u@10.0.0.1:9;x>") == "10.0.0.1:9"


class TestParseCallbackAddress:

    def test_ipv4(self):
        assert parse_callback_address("10.0.0.1:4444") == CallbackAddress("10.0.0.1", 4444)

    def test_hostname(self):
        assert parse_callback_address("nat.example.com:80") == ("nat.example.com", 80)

    def test_ipv6_brackets(self):
        address = parse_callback_address("[2001:db8::1]:5060")
        assert address == CallbackAddress("2001:db8::1", 5060)
        assert str(address) == "[2001:db8::1]:5060"

    def test_str(self):
        assert str(CallbackAddress("10.0.0.1", 4444)) == "10.0.0.1:4444"

    @pytest.mark.parametrize("text", [
        "10.0.0.1",
        ":4444",
        "10.0.0.1:",
        "10.0.0.1:http",
        "10.0.0.1:0",
        "10.0.0.1:70000",
        "1.2.3.4:5>",
    ])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_callback_address(text)
