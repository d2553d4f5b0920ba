"""Unit tests for nips.event_builders module.

Tests the (content, kind, tags) templates for every published kind:
Kind 0/1/6/7 (NIP-01, NIP-10, NIP-18, NIP-25), Kind 3 (NIP-02), Kind 4
(NIP-04), Kind 9734 (NIP-57), Kind 10000 (NIP-51) and Kind 30078 (NIP-78).
"""

from __future__ import annotations

import json

import pytest

from nostrfeed.core import ConstructionError
from nostrfeed.models import EventKind, Post, UserProfile
from nostrfeed.nips.event_builders import (
    NoteZapTarget,
    ProfileZapTarget,
    RelayInfo,
    build_chat_read,
    build_contacts,
    build_direct_message,
    build_first_contact,
    build_get_settings,
    build_mark_all_chats_read,
    build_metadata,
    build_mute_list,
    build_post,
    build_reaction,
    build_reply,
    build_repost,
    build_update_settings,
    build_wallet_command,
    build_wallet_zap,
    build_zap_request,
)
from tests.conftest import ALICE, BOB, CAROL


PARENT = Post(id="abc", pubkey="def", created_at=1_700_000_000, content="parent")


# ============================================================================
# Kind 0 / 1 / 6 / 7
# ============================================================================


class TestBuildPost:
    """Tests for build_post()."""

    def test_no_mentions(self) -> None:
        template = build_post("gm")
        assert template == ("gm", EventKind.TEXT_NOTE, [])

    def test_mentions(self) -> None:
        template = build_post("hi", [ALICE, BOB])
        assert template.tags == [["p", ALICE, "", "mention"], ["p", BOB, "", "mention"]]

    def test_empty_mention_rejected(self) -> None:
        with pytest.raises(ConstructionError):
            build_post("hi", [""])


class TestBuildReply:
    """Tests for build_reply()."""

    def test_exact_tags(self) -> None:
        template = build_reply("hello", PARENT)
        assert template.kind == 1
        assert template.content == "hello"
        assert template.tags == [["e", "abc", "", "reply"], ["p", "def"]]

    def test_mentions_follow(self) -> None:
        template = build_reply("hello", PARENT, [CAROL])
        assert template.tags[:2] == [["e", "abc", "", "reply"], ["p", "def"]]
        assert template.tags[2] == ["p", CAROL, "", "mention"]

    def test_parent_without_id(self) -> None:
        with pytest.raises(ConstructionError, match="parent id"):
            build_reply("hello", Post(id="", pubkey="def", created_at=1))


class TestBuildRepost:
    """Tests for build_repost()."""

    def test_shape(self) -> None:
        template = build_repost(PARENT)
        assert template.kind == EventKind.REPOST
        assert template.tags == [["e", "abc"], ["p", "def"]]
        assert json.loads(template.content) == PARENT.to_dict()
        assert ", " not in template.content


class TestBuildReaction:
    """Tests for build_reaction()."""

    def test_like(self) -> None:
        assert build_reaction(PARENT) == ("+", EventKind.REACTION, [["e", "abc"], ["p", "def"]])

    def test_custom(self) -> None:
        assert build_reaction(PARENT, "🤙").content == "🤙"


class TestBuildMetadata:
    """Tests for build_metadata()."""

    def test_content(self) -> None:
        template = build_metadata(UserProfile(pubkey=ALICE, name="alice", lud16="a@b.c"))
        assert template.kind == EventKind.METADATA
        assert json.loads(template.content) == {"name": "alice", "lud16": "a@b.c"}
        assert template.tags == []


# ============================================================================
# Kind 3
# ============================================================================


class TestBuildContacts:
    """Tests for build_contacts() and build_first_contact()."""

    def test_tags_sorted_unique(self) -> None:
        template = build_contacts([BOB, ALICE, BOB], {})
        assert template.kind == EventKind.CONTACTS
        assert template.tags == [["p", ALICE], ["p", BOB]]

    def test_relay_content(self) -> None:
        template = build_contacts(
            [ALICE],
            {"wss://b.example": RelayInfo(read=True, write=False), "wss://a.example": RelayInfo()},
        )
        assert template.content == (
            '{"wss://a.example":{"read":true,"write":true},'
            '"wss://b.example":{"read":true,"write":false}}'
        )

    def test_first_contact(self) -> None:
        template = build_first_contact(ALICE, ["wss://relay.example.com"])
        assert template.tags == [["p", ALICE]]
        assert json.loads(template.content) == {
            "wss://relay.example.com": {"read": True, "write": True}
        }


# ============================================================================
# Kind 4
# ============================================================================


class TestBuildDirectMessage:
    """Tests for build_direct_message()."""

    def test_shape(self) -> None:
        assert build_direct_message("cipher?iv=x", BOB) == (
            "cipher?iv=x",
            EventKind.DIRECT_MESSAGE,
            [["p", BOB]],
        )

    def test_empty_ciphertext(self) -> None:
        with pytest.raises(ConstructionError):
            build_direct_message("", BOB)


# ============================================================================
# Kind 9734
# ============================================================================


class TestBuildZapRequest:
    """Tests for build_zap_request() and build_wallet_zap()."""

    def test_profile_target(self) -> None:
        template = build_zap_request("thanks", ProfileZapTarget(BOB), ["wss://r1", "wss://r2"])
        assert template.kind == EventKind.ZAP_REQUEST
        assert template.tags == [["p", BOB], ["relays", "wss://r1", "wss://r2"]]

    def test_note_target(self) -> None:
        template = build_zap_request("", NoteZapTarget("abc", "def"), ["wss://r1"])
        assert template.tags == [["e", "abc"], ["p", "def"], ["relays", "wss://r1"]]

    def test_unknown_target(self) -> None:
        with pytest.raises(ConstructionError):
            build_zap_request("", "abc", [])  # type: ignore[arg-type]

    def test_wallet_zap(self) -> None:
        template = build_wallet_zap("nice", 21, PARENT, ["wss://r1"])
        assert template.tags == [
            ["p", "def"],
            ["e", "abc"],
            ["amount", "21000"],
            ["relays", "wss://r1"],
        ]

    def test_wallet_zap_without_relays(self) -> None:
        assert build_wallet_zap("", 1, PARENT).tags[-1] == ["amount", "1000"]

    @pytest.mark.parametrize("sats", [0, -5, True, 1.5])
    def test_wallet_zap_invalid_amount(self, sats: object) -> None:
        with pytest.raises(ConstructionError, match="sats"):
            build_wallet_zap("", sats, PARENT)  # type: ignore[arg-type]

    def test_wallet_command(self) -> None:
        assert build_wallet_command('["balance"]') == ('["balance"]', EventKind.WALLET, [])


# ============================================================================
# Kind 10000
# ============================================================================


class TestBuildMuteList:
    """Tests for build_mute_list()."""

    def test_order_kept_duplicates_dropped(self) -> None:
        template = build_mute_list([CAROL, ALICE, CAROL])
        assert template == ("", EventKind.MUTE_LIST, [["p", CAROL], ["p", ALICE]])


# ============================================================================
# Kind 30078
# ============================================================================


class TestAppSettings:
    """Tests for settings and chat marker templates."""

    def test_get_settings(self) -> None:
        template = build_get_settings("myapp")
        assert template.kind == EventKind.APP_SETTINGS
        assert template.tags == [["d", "myapp"]]
        assert json.loads(template.content) == {"description": "Sync app settings"}

    def test_update_settings(self) -> None:
        template = build_update_settings({"theme": "dark", "notifications": {"likes": True}})
        assert json.loads(template.content) == {"theme": "dark", "notifications": {"likes": True}}
        assert template.tags == [["d", "nostrfeed"]]

    def test_chat_read_is_valid_json(self) -> None:
        template = build_chat_read(BOB)
        assert json.loads(template.content) == {"description": f"reset messages from '{BOB}'"}

    def test_mark_all_chats_read(self) -> None:
        template = build_mark_all_chats_read()
        assert json.loads(template.content) == {"description": "mark all messages as read"}

    def test_empty_app_name(self) -> None:
        with pytest.raises(ConstructionError):
            build_get_settings("")
