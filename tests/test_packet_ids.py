import pytest

from clams.packet_ids import ConfigPacket, LoginPacket, StatusPacket


@pytest.mark.parametrize(
    "value, name",
    [(0x00, "RESPONSE"), (0x01, "PONG_RESPONSE")],
)
def test_status_ids(value, name):
    assert StatusPacket(value).name == name


@pytest.mark.parametrize(
    "value, name",
    [(0x00, "DISCONNECT"), (0x02, "SUCCESS"), (0x03, "SET_COMPRESSION"), (0x05, "COOKIE_REQUEST")],
)
def test_login_ids(value, name):
    assert LoginPacket(value).name == name


@pytest.mark.parametrize(
    "value, name",
    [(0x01, "PLUGIN_MESSAGE"), (0x03, "FINISH"), (0x0C, "FEATURE_FLAGS"), (0x10, "SERVER_LINKS")],
)
def test_config_ids(value, name):
    assert ConfigPacket(value).name == name


@pytest.mark.parametrize("enum", [StatusPacket, LoginPacket, ConfigPacket])
def test_ids_are_contiguous_from_zero(enum):
    assert sorted(member.value for member in enum) == list(range(len(enum)))


def test_lookup_by_value():
    assert ConfigPacket(0x0E) is ConfigPacket.KNOWN_PACKS
    with pytest.raises(ValueError):
        LoginPacket(0x06)