"""
Tests for bcrypt password hashing.
"""

from auth.password import DEFAULT_ROUNDS, PasswordHasher


class TestPasswordHasher:
    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_default_work_factor(self):
        assert DEFAULT_ROUNDS == 10
        assert PasswordHasher().rounds == 10

    def test_hash_embeds_work_factor(self):
        assert self.hasher.hash("pw").startswith("$2b$04$")

    def test_correct_password_verifies(self):
        hashed = self.hasher.hash("hunter2")
        assert self.hasher.verify("hunter2", hashed)

    def test_altered_password_fails(self):
        hashed = self.hasher.hash("hunter2")
        assert not self.hasher.verify("hunter3", hashed)
        assert not self.hasher.verify("Hunter2", hashed)
        assert not self.hasher.verify("", hashed)

    def test_salted(self):
        assert self.hasher.hash("same") != self.hasher.hash("same")

    def test_malformed_hash_is_a_mismatch(self):
        assert not self.hasher.verify("pw", "not-a-bcrypt-hash")
