"""Tests for building queue messages from work items."""
import json

from conftest import CONTRACT, make_item
from media_producer.dispatcher import build_message, media_files, message_id


class TestMessageId:
    def test_short_token_id_used_whole(self):
        assert message_id(CONTRACT, "1234") == f"{CONTRACT}-1234"

    def test_long_token_id_truncated_to_30_chars(self):
        token_id = "1234567890" * 4
        assert len(token_id) == 40

        msg_id = message_id(CONTRACT, token_id)

        assert msg_id == f"{CONTRACT}-123456789012345678901234567890"
        assert msg_id.split("-", 1)[1] == token_id[:30]

    def test_exactly_30_chars_not_padded(self):
        token_id = "9" * 30
        assert message_id(CONTRACT, token_id) == f"{CONTRACT}-{token_id}"

    def test_fits_sqs_id_limit(self):
        assert len(message_id(CONTRACT, "7" * 78)) <= 80


class TestMediaFiles:
    def test_image_then_animation(self):
        metadata = {"animation_url": "ipfs://anim.mp4", "image": "ipfs://img.png"}
        assert media_files(metadata) == ["ipfs://img.png", "ipfs://anim.mp4"]

    def test_only_animation(self):
        assert media_files({"animation_url": "https://x/a.glb"}) == ["https://x/a.glb"]

    def test_empty_values_skipped(self):
        assert media_files({"image": "", "animation_url": None, "name": "Kitty"}) == []

    def test_missing_or_malformed_metadata(self):
        assert media_files(None) == []
        assert media_files("not a dict") == []


class TestBuildMessage:
    def test_identity_fields_match(self):
        message = build_message(make_item(token_id="42"))
        assert message.id == f"{CONTRACT}-42"
        assert message.group_id == message.id
        assert message.deduplication_id == message.id

    def test_repeated_builds_are_identical(self):
        item = make_item(token_id="8" * 40, metadata={"image": "ipfs://a"})
        first, second = build_message(item), build_message(item)
        assert first == second
        assert first.to_entry() == second.to_entry()

    def test_body_keeps_full_token_id(self):
        token_id = "5" * 40
        message = build_message(make_item(token_id=token_id))
        assert message.body.token_id == token_id

    def test_no_media_still_builds(self):
        message = build_message(make_item(metadata={"name": "no media"}))
        assert message.body.media_files == []

    def test_entry_serializes_body_as_json(self):
        message = build_message(make_item(
            token_id="7",
            metadata={"image": "ipfs://img.png", "animation_url": "ipfs://anim.mp4"},
        ))
        entry = message.to_entry()

        assert entry["Id"] == f"{CONTRACT}-7"
        assert entry["MessageGroupId"] == entry["Id"]
        assert entry["MessageDeduplicationId"] == entry["Id"]
        assert json.loads(entry["MessageBody"]) == {
            "contractAddress": CONTRACT,
            "tokenId": "7",
            "mediaFiles": ["ipfs://img.png", "ipfs://anim.mp4"],
        }

    def test_string_body_passed_through(self):
        message = build_message(make_item())
        message.body = '{"already": "encoded"}'
        assert message.to_entry()["MessageBody"] == '{"already": "encoded"}'
