"""
Tests for websocket frame validation.
"""
import pytest
from pydantic import ValidationError

from api.schemas import FindPartnerRequest, SendMessageRequest
from config.settings import settings
from core.models import Gender, normalize_interests


class TestFindPartnerRequest:
    def test_defaults(self):
        profile = FindPartnerRequest.model_validate({"type": "find_partner"}).to_profile()
        assert profile.gender_self == Gender.ANY
        assert profile.gender_pref == Gender.ANY
        assert profile.interests == ()

    def test_interests_are_normalized(self):
        request = FindPartnerRequest.model_validate({"interests": [" Music", "music", "Art"]})
        assert request.interests == ["music", "art"]

    def test_comma_separated_interests(self):
        request = FindPartnerRequest.model_validate({"interests": "music, art"})
        assert request.interests == ["music", "art"]

    def test_interests_are_capped(self):
        tags = [f"tag{i}" for i in range(settings.MAX_INTERESTS + 5)]
        request = FindPartnerRequest.model_validate({"interests": tags})
        assert len(request.interests) == settings.MAX_INTERESTS

    @pytest.mark.parametrize("interests", [5, True, 1.5, {"tag": "music"}])
    def test_non_list_interests_are_rejected(self, interests):
        with pytest.raises(ValidationError):
            FindPartnerRequest.model_validate({"interests": interests})

    @pytest.mark.parametrize("interests", [["music", None], [7], ["art", ["nested"]]])
    def test_non_string_tags_are_rejected(self, interests):
        with pytest.raises(ValidationError):
            FindPartnerRequest.model_validate({"interests": interests})


class TestSendMessageRequest:
    def test_blank_content_is_rejected(self):
        with pytest.raises(ValidationError):
            SendMessageRequest.model_validate({"roomId": "r", "content": "  \n "})

    def test_long_content_is_rejected(self):
        with pytest.raises(ValidationError):
            SendMessageRequest.model_validate({"roomId": "r", "content": "x" * (settings.MAX_MESSAGE_LENGTH + 1)})


def test_normalize_interests_ignores_non_strings():
    assert normalize_interests([None, 7, " Chess "]) == ("chess",)
