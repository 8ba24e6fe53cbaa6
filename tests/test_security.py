from todo_api.core.security import BCRYPT_MAX_BYTES, PasswordHasher


def test_hash_and_compare_password():
    hasher = PasswordHasher(rounds=4)
    digest = hasher.hash("pw123456")

    assert digest != "pw123456"
    assert digest.startswith("$2")
    assert hasher.compare("pw123456", digest)
    assert not hasher.compare("pw1234567", digest)


def test_hash_is_salted():
    hasher = PasswordHasher(rounds=4)

    assert hasher.hash("pw123456") != hasher.hash("pw123456")


def test_compare_without_digest_is_false():
    hasher = PasswordHasher(rounds=4)

    assert hasher.compare("pw123456", None) is False
    assert hasher.compare("pw123456", "") is False


def test_compare_against_malformed_digest_is_false():
    assert PasswordHasher(rounds=4).compare("pw123456", "not-a-bcrypt-digest") is False


def test_long_inputs_differing_after_limit_do_not_collide():
    hasher = PasswordHasher(rounds=4)
    prefix = "x" * (BCRYPT_MAX_BYTES + 8)
    digest = hasher.hash(prefix + "a")

    assert hasher.compare(prefix + "a", digest)
    assert not hasher.compare(prefix + "b", digest)


def test_work_factor_is_encoded_in_digest():
    assert PasswordHasher(rounds=5).hash("pw123456").split("$")[2] == "05"
