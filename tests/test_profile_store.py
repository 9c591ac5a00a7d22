import pytest

from manasika.services.profile_store import ProfileStore, ProfileValidationError
from manasika.utils.blob_store import PROFILE_KEY, InMemoryBlobStore


def test_defaults_when_nothing_saved(storage):
    profile = ProfileStore(storage).profile
    assert profile.id == 'default-user'
    assert profile.name == ''
    assert profile.preferences.weekly_insights is True
    assert profile.preferences.daily_reminders is False
    assert profile.preferences.theme == 'light'


def test_save_and_reload(storage):
    ProfileStore(storage).save(name=' Asha ', email='asha@example.com', theme='dark', daily_reminders=True)

    profile = ProfileStore(storage).profile
    assert profile.name == 'Asha'
    assert profile.email == 'asha@example.com'
    assert profile.preferences.theme == 'dark'
    assert profile.preferences.daily_reminders is True
    assert profile.preferences.language == 'en'


@pytest.mark.parametrize('kwargs', [
    {'name': '   '},
    {'name': 'Asha', 'language': 'fr'},
    {'name': 'Asha', 'theme': 'neon'},
    {'name': 'Asha', 'font_size': 12},
])
def test_invalid_updates_rejected(storage, kwargs):
    store = ProfileStore(storage)
    with pytest.raises(ProfileValidationError):
        store.save(**kwargs)
    assert storage.get(PROFILE_KEY) is None
    assert store.profile.name == ''


def test_name_required_even_when_only_preferences_change(storage):
    with pytest.raises(ProfileValidationError):
        ProfileStore(storage).save(theme='dark')


def test_corrupt_profile_uses_defaults():
    store = ProfileStore(InMemoryBlobStore({PROFILE_KEY: '["not", "a", "profile"]'}))
    assert store.profile.name == ''


def test_reset(storage):
    store = ProfileStore(storage)
    store.save(name='Asha')
    assert store.reset().name == ''
