import pytest

from clams.entity import Entity, GameMode, Player, Position, UUID, Vec3D


def test_uuid_str_is_hex_of_both_halves():
    assert str(UUID(0x1, 0xAB)) == "1ab"


def test_uuid_str_full_width():
    uid = UUID(0xDEADBEEFDEADBEEF, 0x0123456789ABCDEF)
    assert str(uid) == "deadbeefdeadbeef123456789abcdef"


def test_uuid_equality():
    assert UUID(5, 6) == UUID(5, 6)
    assert UUID(5, 6) != UUID(6, 5)


@pytest.mark.parametrize("most,least", [(-1, 0), (0, 1 << 64)])
def test_uuid_rejects_out_of_range(most, least):
    with pytest.raises(ValueError):
        UUID(most, least)


@pytest.mark.parametrize("k", [0, 1, 3, 100])
def test_position_chunk_index(k):
    pos = Position(x=16 * k + 5.7, z=16 * k + 15.2)
    assert pos.cx() == k
    assert pos.cz() == k


def test_position_chunk_boundary():
    pos = Position(x=15.99, z=16.0)
    assert pos.cx() == 0
    assert pos.cz() == 1


def test_position_negative_truncates_toward_zero_then_shifts():
    # -0.5 truncates to 0, so it is still chunk 0
    assert Position(x=-0.5).cx() == 0
    assert Position(z=-1.0).cz() == -1


def test_position_defaults():
    pos = Position()
    assert (pos.x, pos.y, pos.z, pos.yaw, pos.pitch) == (0.0, 0.0, 0.0, 0.0, 0.0)


def test_vec3d_fields():
    vec = Vec3D(1.0, 2.0, 3.0)
    assert (vec.x, vec.y, vec.z) == (1.0, 2.0, 3.0)


def test_entity_holds_uuid_and_default_position():
    uid = UUID(1, 2)
    entity = Entity(uid)
    assert entity.uuid == uid
    assert entity.position == Position()


def test_player_has_username_and_uuid():
    uid = UUID(3, 4)
    player = Player(uid, "Steve")
    assert player.username == "Steve"
    assert player.uuid == uid
    assert isinstance(player, Entity)
    assert player.position.cx() == 0


@pytest.mark.parametrize(
    "value, name",
    [(0, "SURVIVAL"), (1, "CREATIVE"), (2, "ADVENTURE"), (3, "SPECTATOR")],
)
def test_gamemode_lookup_by_value(value, name):
    assert GameMode(value).name == name


def test_gamemode_unknown_value_raises():
    with pytest.raises(ValueError):
        GameMode(4)