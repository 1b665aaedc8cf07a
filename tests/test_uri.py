import pytest

import twofactor
from twofactor import TOTP, parse_uri
from twofactor.exceptions import ConfigError
from twofactor.utils import build_uri, strings_equal

SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_build_uri_without_issuer():
    assert build_uri(SECRET, "alice") == "otpauth://totp/alice?secret={}&algorithm=SHA1&digits=6&period=30".format(SECRET)


def test_build_uri_escapes_label():
    uri = build_uri(SECRET, "alice:ops/1", issuer="Foo & Bar")
    assert uri.startswith("otpauth://totp/Foo%20%26%20Bar:alice%3Aops%2F1?")
    assert "&issuer=Foo%20%26%20Bar&" in uri


def test_build_uri_strips_padding():
    assert "secret=MZXW6YTBOI&" in build_uri("MZXW6YTBOI======", "alice")


def test_build_uri_image():
    uri = build_uri(SECRET, "alice", image="https://example.com/logo.png")
    assert uri.endswith("&image=https%3A%2F%2Fexample.com%2Flogo.png")
    with pytest.raises(ConfigError):
        build_uri(SECRET, "alice", image="http://example.com/logo.png")


def test_build_uri_rejects_non_string_extras():
    with pytest.raises(ConfigError):
        build_uri(SECRET, "alice", foo=1)


def test_provisioning_uri():
    handler = TOTP(SECRET, digits=8, algorithm="SHA512", name="alice@example.com", issuer="ACME", interval=60)
    assert handler.provisioning_uri() == (
        "otpauth://totp/ACME:alice%40example.com?secret={}&issuer=ACME&algorithm=SHA512&digits=8&period=60".format(SECRET)
    )
    assert handler.provisioning_uri(name="bob", issuer_name="Other").startswith("otpauth://totp/Other:bob?")


def test_parse_uri_inverts_enrollment():
    enrollment = twofactor.generate_secret("alice@example.com", issuer="e-Patrol Log")
    handler = parse_uri(enrollment.provisioning_uri)
    assert handler.secret == enrollment.secret
    assert handler.name == "alice@example.com"
    assert handler.issuer == "e-Patrol Log"
    assert handler.params == twofactor.TotpParameters(issuer="e-Patrol Log", account="alice@example.com")
    assert handler.provisioning_uri() == enrollment.provisioning_uri


def test_parse_uri_minimal():
    handler = parse_uri("otpauth://totp/alice?secret=JBSWY3DPEHPK3PXP")
    assert handler.name == "alice"
    assert handler.issuer is None
    assert (handler.algorithm, handler.digits, handler.interval) == ("SHA1", 6, 30)


def test_parse_uri_encoded_separator():
    handler = parse_uri("otpauth://totp/ACME%3Aalice?secret=JBSWY3DPEHPK3PXP&issuer=ACME&period=60&digits=8&algorithm=SHA256")
    assert handler.issuer == "ACME"
    assert handler.name == "alice"
    assert (handler.algorithm, handler.digits, handler.interval) == ("SHA256", 8, 60)


@pytest.mark.parametrize(
    "uri",
    [
        "https://totp/alice?secret=JBSWY3DPEHPK3PXP",
        "otpauth://hotp/alice?secret=JBSWY3DPEHPK3PXP&counter=0",
        "otpauth://totp/alice?issuer=ACME",
        "otpauth://totp/ACME:alice?secret=JBSWY3DPEHPK3PXP&issuer=Other",
        "otpauth://totp/alice?secret=JBSWY3DPEHPK3PXP&algorithm=MD5",
        "otpauth://totp/alice?secret=JBSWY3DPEHPK3PXP&digits=5",
        "otpauth://totp/alice?secret=JBSWY3DPEHPK3PXP&digits=six",
        "otpauth://totp/alice?secret=JBSWY3DPEHPK3PXP&period=0",
    ],
)
def test_parse_uri_rejects(uri):
    with pytest.raises(ConfigError):
        parse_uri(uri)


def test_strings_equal():
    assert strings_equal("287082", "287082")
    assert not strings_equal("287082", "287083")
    assert not strings_equal("287082", "28708")
    assert strings_equal("２８７０８２", "287082")


def test_parse_uri_colon_in_account_without_issuer():
    enrollment = twofactor.generate_secret("ops:alice")
    assert "/ops%3Aalice?" in enrollment.provisioning_uri
    handler = parse_uri(enrollment.provisioning_uri)
    assert handler.issuer is None
    assert handler.name == "ops:alice"
    assert handler.provisioning_uri() == enrollment.provisioning_uri


def test_parse_uri_colon_in_account_with_issuer():
    enrollment = twofactor.generate_secret("ops:alice", issuer="ACME")
    handler = parse_uri(enrollment.provisioning_uri)
    assert handler.issuer == "ACME"
    assert handler.name == "ops:alice"


def test_parse_uri_encoded_colon_with_other_issuer_stays_in_account():
    handler = parse_uri("otpauth://totp/ops%3Aalice?secret=JBSWY3DPEHPK3PXP&issuer=ACME")
    assert handler.issuer == "ACME"
    assert handler.name == "ops:alice"
