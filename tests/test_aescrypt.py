import pytest

from matrixkit.aescrypt import decrypt, encrypt

KEY = "secret"
BENCH_TEXT = b"This is a test plaintext for benchmarking"


def test_aes192_round_trip_from_source_case():
    plaintext = b"Hello, World!"
    ciphertext = encrypt(plaintext, KEY, "AES-192")
    assert decrypt(ciphertext, KEY, "AES-192") == plaintext


def test_aes256_round_trip_from_benchmark_case():
    ciphertext = encrypt(BENCH_TEXT, KEY, "AES-256")
    assert decrypt(ciphertext, KEY, "AES-256") == BENCH_TEXT


@pytest.mark.parametrize(
    "algorithm",
    ["AES-128", "AES128", "AES", "AES-128-CBC", "AES192CBC", "AES256", "AES-256-CBC"],
)
def test_round_trip_all_names(algorithm):
    ciphertext = encrypt(BENCH_TEXT, KEY, algorithm)
    assert len(ciphertext) == 16 + len(BENCH_TEXT)
    assert ciphertext[16:] != BENCH_TEXT
    assert decrypt(ciphertext, KEY, algorithm) == BENCH_TEXT


def test_empty_plaintext_gives_only_iv():
    ciphertext = encrypt(b"", KEY, "AES-256")
    assert len(ciphertext) == 16
    assert decrypt(ciphertext, KEY, "AES-256") == b""


@pytest.mark.parametrize("algorithm", ["NONE", "", "NULL", "null-cbc"])
def test_no_encryption_algorithms_pass_through(algorithm):
    assert encrypt(BENCH_TEXT, KEY, algorithm) == BENCH_TEXT
    assert decrypt(BENCH_TEXT, KEY, algorithm) == BENCH_TEXT


def test_empty_key_passes_through():
    assert encrypt(BENCH_TEXT, "", "AES-256") == BENCH_TEXT
    assert decrypt(b"short", "", "AES-256") == b"short"


def test_short_ciphertext_raises():
    with pytest.raises(ValueError, match="too short"):
        decrypt(b"0123456789", KEY, "AES-256")


def test_random_iv_makes_outputs_differ():
    first = encrypt(BENCH_TEXT, KEY, "AES-256")
    second = encrypt(BENCH_TEXT, KEY, "AES-256")
    assert first != second
    assert decrypt(first, KEY, "AES-256") == decrypt(second, KEY, "AES-256")


def test_wrong_key_does_not_recover_plaintext():
    ciphertext = encrypt(BENCH_TEXT, KEY, "AES-256")
    assert decrypt(ciphertext, "placeholder", "AES-256") != BENCH_TEXT


def test_different_algorithm_does_not_recover_plaintext():
    ciphertext = encrypt(BENCH_TEXT, KEY, "AES-256")
    assert decrypt(ciphertext, KEY, "AES-192") != BENCH_TEXT


def test_unknown_algorithm_falls_back_to_aes128():
    ciphertext = encrypt(BENCH_TEXT, KEY, "BLOWFISH")
    assert decrypt(ciphertext, KEY, "AES-128") == BENCH_TEXT


def test_algorithm_names_are_case_insensitive():
    ciphertext = encrypt(BENCH_TEXT, KEY, "aes-256")
    assert decrypt(ciphertext, KEY, "AES256CBC") == BENCH_TEXT