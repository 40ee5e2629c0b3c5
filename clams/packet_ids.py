"""Identifiers of packets sent from the server to the client."""

from enum import IntEnum


class StatusPacket(IntEnum):
    RESPONSE = 0x00
    PONG_RESPONSE = 0x01


class LoginPacket(IntEnum):
    DISCONNECT = 0x00
    ENCRYPTION_REQUEST = 0x01
    SUCCESS = 0x02
    SET_COMPRESSION = 0x03
    PLUGIN_REQUEST = 0x04
    COOKIE_REQUEST = 0x05


class ConfigPacket(IntEnum):
    COOKIE_REQUEST = 0x00
    PLUGIN_MESSAGE = 0x01
    DISCONNECT = 0x02
    FINISH = 0x03
    KEEP_ALIVE = 0x04
    PING = 0x05
    RESET_CHAT = 0x06
    REGISTRY_DATA = 0x07
    REMOVE_RESOURCE_PACK = 0x08
    ADD_RESOURCE_PACK = 0x09
    STORE_COOKIE = 0x0A
    TRANSFER = 0x0B
    FEATURE_FLAGS = 0x0C
    UPDATE_TAGS = 0x0D
    KNOWN_PACKS = 0x0E
    CUSTOM_REPORT_DETAILS = 0x0F
    SERVER_LINKS = 0x10