# tests/test_rotation.py

import json
import pytest
from bind_directory.crypto import compute_jwk_thumbprint
from bind_directory.keys import key_status
from bind_directory.rotation import KeyManager, RemoveCommand, RetireCommand, RotateCommand
from bind_directory.storage import FilesystemRepository, InMemoryRepository, ParticipantNotFoundError
from conftest import DAY, NOW, participant_files, public_key


def manager(repo):
    return KeyManager(repo, clock=lambda: NOW)


def live_count(key_set, now=NOW):
    return sum(1 for k in key_set.keys if key_status(k, now) in ("active", "pending"))


def test_list_keys(repo):
    result = manager(repo).list_keys("acme")
    assert result.ok
    assert len(result.key_set) == 1


def test_unknown_participant_raises(repo):
    with pytest.raises(ParticipantNotFoundError):
        manager(repo).rotate("ghost")


def test_default_rotation_adds_active_key_without_gap(repo):
    before = repo.read_key_set("acme")
    result = manager(repo).rotate("acme")

    assert result.ok and result.warnings == []
    after = repo.read_key_set("acme")
    assert len(after) == len(before) + 1
    assert live_count(after) == live_count(before) + 1

    new = after.keys[-1]
    assert new.kid == compute_jwk_thumbprint(new)
    assert (new.use, new.alg, new.iat) == ("sig", "ES256", NOW)
    assert new.nbf is None and new.exp is None
    assert key_status(new, NOW) == "active"
    # old key untouched
    assert after.keys[0].exp is None


def test_rotation_never_publishes_private_material(repo):
    manager(repo).rotate("acme")
    for key in json.loads(repo.read_bytes("acme", "jwks.json"))["keys"]:
        assert "d" not in key


def test_first_private_key_lands_in_private_key_json(repo):
    result = manager(repo).rotate("acme")
    assert result.private_key_artifact == "private-key.json"
    private = json.loads(repo.read_bytes("acme", "private-key.json"))
    assert private["kid"] == result.key_set.keys[-1].kid
    assert "d" in private


def test_existing_private_key_is_preserved(repo):
    repo.write_bytes("acme", "private-key.json", b'{"kid": "original"}\n')
    result = manager(repo).rotate("acme")

    kid = result.key_set.keys[-1].kid
    assert result.private_key_artifact == f"private-key-{kid[:8]}.json"
    assert repo.read_bytes("acme", "private-key.json") == b'{"kid": "original"}\n'
    assert json.loads(repo.read_bytes("acme", result.private_key_artifact))["kid"] == kid


def test_rotation_schedules_retirement_of_active_keys_only():
    keys = [
        public_key(),
        public_key(exp=NOW - DAY),        # already expired
        public_key(nbf=NOW + 5 * DAY),    # pending
    ]
    repo = InMemoryRepository({"acme": participant_files(keys=keys)})
    result = manager(repo).rotate("acme", RotateCommand(retire_active_after_days=30))

    ks = repo.read_key_set("acme")
    assert result.ok
    assert ks.keys[0].exp == NOW + 30 * DAY
    assert ks.keys[1].exp == NOW - DAY
    assert ks.keys[2].exp is None
    assert ks.keys[3].exp is None


def test_rotation_with_activation_and_expiry():
    repo = InMemoryRepository({"acme": participant_files()})
    result = manager(repo).rotate("acme", RotateCommand(new_key_expiry_days=365,
                                                        new_key_activation_delay_days=7))
    new = result.key_set.keys[-1]
    assert (new.nbf, new.exp) == (NOW + 7 * DAY, NOW + 365 * DAY)
    assert key_status(new, NOW) == "pending"
    private = json.loads(repo.read_bytes("acme", "private-key.json"))
    assert (private["nbf"], private["exp"]) == (new.nbf, new.exp)


def test_rotation_refuses_key_that_expires_before_activation(repo):
    before = repo.read_bytes("acme", "jwks.json")
    result = manager(repo).rotate("acme", RotateCommand(new_key_expiry_days=5,
                                                        new_key_activation_delay_days=10))
    assert not result.ok
    assert "expire before it becomes valid" in result.reason
    assert repo.read_bytes("acme", "jwks.json") == before
    assert not repo.has_artifact("acme", "private-key.json")


@pytest.mark.parametrize("cmd", [
    RotateCommand(retire_active_after_days=-1),
    RotateCommand(new_key_expiry_days="30"),
    RotateCommand(new_key_activation_delay_days=1.5),
])
def test_rotation_refuses_invalid_day_counts(repo, cmd):
    before = repo.read_bytes("acme", "jwks.json")
    result = manager(repo).rotate("acme", cmd)
    assert not result.ok
    assert repo.read_bytes("acme", "jwks.json") == before


def test_rotation_warns_about_trust_gap(repo, caplog):
    result = manager(repo).rotate("acme", RotateCommand(retire_active_after_days=10,
                                                        new_key_activation_delay_days=20))
    assert result.ok
    assert len(result.warnings) == 1
    assert "no usable key" in result.warnings[0]
    assert "no usable key" in caplog.text


def test_rotation_logs_intent_before_writes(repo, caplog):
    manager(repo).rotate("acme")
    assert "writing jwks.json" in caplog.text
    assert "writing private-key.json" in caplog.text


def test_retire_sets_exp_on_selected_active_key():
    keys = [public_key(), public_key()]
    repo = InMemoryRepository({"acme": participant_files(keys=keys)})
    result = manager(repo).retire("acme", RetireCommand(key_id=keys[1]["kid"], expire_after_days=14))
    assert result.ok
    ks = repo.read_key_set("acme")
    assert ks.keys[0].exp is None
    assert ks.keys[1].exp == NOW + 14 * DAY


def test_retire_immediately_clamps_negative_days(repo):
    kid = repo.read_key_set("acme").keys[0].kid
    manager(repo).retire("acme", RetireCommand(key_id=kid, expire_after_days=-3))
    assert repo.read_key_set("acme").keys[0].exp == NOW


def test_retire_refused_without_active_keys():
    repo = InMemoryRepository({"acme": participant_files(keys=[public_key(exp=NOW - DAY)])})
    before = repo.read_bytes("acme", "jwks.json")
    result = manager(repo).retire("acme", RetireCommand(key_id="anything"))
    assert not result.ok
    assert "no active keys" in result.reason
    assert repo.read_bytes("acme", "jwks.json") == before


def test_retire_refuses_non_active_selection():
    pending = public_key(nbf=NOW + DAY)
    repo = InMemoryRepository({"acme": participant_files(keys=[public_key(), pending])})
    result = manager(repo).retire("acme", RetireCommand(key_id=pending["kid"]))
    assert not result.ok
    assert "not an active key" in result.reason


def test_remove_sole_key_is_refused_and_file_untouched(tmp_path):
    repo = FilesystemRepository(tmp_path)
    repo.create_participant("acme")
    for name, data in participant_files().items():
        repo.write_bytes("acme", name, data)
    path = tmp_path / "acme" / "jwks.json"
    before = path.read_bytes()
    kid = repo.read_key_set("acme").keys[0].kid

    result = manager(repo).remove("acme", RemoveCommand(key_id=kid, confirmed=True))

    assert not result.ok
    assert "only key" in result.reason
    assert path.read_bytes() == before


def test_remove_requires_confirmation():
    keys = [public_key(), public_key()]
    repo = InMemoryRepository({"acme": participant_files(keys=keys)})
    before = repo.read_bytes("acme", "jwks.json")
    result = manager(repo).remove("acme", RemoveCommand(key_id=keys[0]["kid"]))
    assert not result.ok
    assert result.reason == "removal not confirmed"
    assert repo.read_bytes("acme", "jwks.json") == before


def test_remove_unknown_kid_is_refused():
    repo = InMemoryRepository({"acme": participant_files(keys=[public_key(), public_key()])})
    result = manager(repo).remove("acme", RemoveCommand(key_id="nope", confirmed=True))
    assert not result.ok
    assert len(repo.read_key_set("acme")) == 2


def test_remove_confirmed_key():
    keys = [public_key(), public_key()]
    repo = InMemoryRepository({"acme": participant_files(keys=keys)})
    result = manager(repo).remove("acme", RemoveCommand(key_id=keys[0]["kid"], confirmed=True))
    assert result.ok
    assert repo.read_key_set("acme").kids() == [keys[1]["kid"]]


def test_rotate_then_remove_old_key(repo):
    km = manager(repo)
    old_kid = repo.read_key_set("acme").keys[0].kid
    km.rotate("acme")
    result = km.remove("acme", RemoveCommand(key_id=old_kid, confirmed=True))
    assert result.ok
    assert len(result.key_set) == 1
    assert result.key_set.keys[0].kid != old_kid


def test_result_to_dict(repo):
    data = manager(repo).remove("acme", RemoveCommand(key_id="x", confirmed=True)).to_dict()
    assert data["ok"] is False
    assert data["keySet"]["keys"]


def test_existing_keys_keep_member_order_through_rotate_and_retire():
    generated = public_key()
    key = {"kid": generated["kid"], "alg": "ES256", "use": "sig", "kty": "EC", "crv": "P-256",
           "x": generated["x"], "y": generated["y"], "exp": None}
    repo = InMemoryRepository({"acme": participant_files("acme", keys=[key])})

    assert manager(repo).rotate("acme").ok
    stored = json.loads(repo.read_bytes("acme", "jwks.json"))["keys"][0]
    assert list(stored.items()) == list(key.items())

    assert manager(repo).retire("acme", RetireCommand(key["kid"], expire_after_days=5)).ok
    stored = json.loads(repo.read_bytes("acme", "jwks.json"))["keys"][0]
    assert list(stored) == list(key)
    assert stored["exp"] == NOW + 5 * DAY
