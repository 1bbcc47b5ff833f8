"""Request schema validation — boundaries the API enforces before any service runs.

Invariants:
    - Unpublish requires an explicit confirm: true
    - Invite codes are normalized at the boundary
    - Pick/collection payloads reject unknown fields and categories
"""

import pytest
from pydantic import ValidationError

from threesby.schemas.collection import CollectionCreate
from threesby.schemas.invite import InviteValidateRequest, SignupRequest
from threesby.schemas.pick import PickCreate, PickUpdate
from threesby.schemas.profile import ProfileUpdate, UnpublishRequest
from threesby.schemas.review import RejectRequest


# --- Profile ------------------------------------------------------------------

def test_unpublish_requires_confirm_true():
    with pytest.raises(ValidationError):
        UnpublishRequest()
    with pytest.raises(ValidationError):
        UnpublishRequest(confirm=False)
    assert UnpublishRequest(confirm=True).confirm is True


def test_profile_update_blank_strings_become_none():
    update = ProfileUpdate(full_name="   ", title=" Editor ")
    assert update.full_name is None
    assert update.title == "Editor"


def test_profile_update_rejects_status_field():
    with pytest.raises(ValidationError):
        ProfileUpdate(status="approved")


def test_profile_update_username_pattern():
    with pytest.raises(ValidationError):
        ProfileUpdate(username="Has Spaces")
    assert ProfileUpdate(username="ada_reads").username == "ada_reads"


def test_profile_update_null_social_links_become_empty():
    assert ProfileUpdate(social_links=None).social_links == {}


# --- Picks --------------------------------------------------------------------

def test_pick_create_strips_title():
    pick = PickCreate(category="books", title="  Dune  ", rank=1)
    assert pick.title == "Dune"


def test_pick_create_rejects_unknown_category():
    with pytest.raises(ValidationError):
        PickCreate(category="movies", title="Alien")


def test_pick_create_rejects_rank_zero():
    with pytest.raises(ValidationError):
        PickCreate(category="books", title="Dune", rank=0)


def test_pick_update_tracks_explicit_null_rank():
    update = PickUpdate(rank=None)
    assert update.model_dump(exclude_unset=True) == {"rank": None}


# --- Reviews ------------------------------------------------------------------

def test_reject_requires_non_blank_note():
    with pytest.raises(ValidationError):
        RejectRequest(note="   ")
    assert RejectRequest(note=" fix places ").note == "fix places"


# --- Invites ------------------------------------------------------------------

def test_invite_code_normalized():
    assert InviteValidateRequest(code=" abcd2345 ").code == "ABCD2345"


def test_signup_requires_plausible_email_and_password():
    with pytest.raises(ValidationError):
        SignupRequest(code="ABCD2345", email="not-an-email", password="longenough")
    with pytest.raises(ValidationError):
        SignupRequest(code="ABCD2345", email="a@b.io", password="short")


# --- Collections --------------------------------------------------------------

def test_collection_defaults():
    collection = CollectionCreate(title="Winter reads")
    assert collection.font_color.value == "dark"
    assert collection.pick_ids == []


def test_collection_rejects_unknown_font_color():
    with pytest.raises(ValidationError):
        CollectionCreate(title="x", font_color="neon")
