from cip.ingestion.origin import UNKNOWN_ADDRESS, client_address


def test_first_forwarded_entry_wins():
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "X-Real-IP": "198.51.100.2"}
    assert client_address(headers, "127.0.0.1") == "203.0.113.7"


def test_real_ip_header_used_without_forwarded_for():
    assert client_address({"x-real-ip": "198.51.100.2"}, "127.0.0.1") == "198.51.100.2"


def test_peer_address_fallback():
    assert client_address({}, "192.0.2.10") == "192.0.2.10"


def test_unknown_when_nothing_available():
    assert client_address({"X-Forwarded-For": " , "}, None) == UNKNOWN_ADDRESS
