import csv
import io
import json
from datetime import datetime

from conftest import make_entry
from manasika.models.core import UserProfile
from manasika.services.data_export import (CSV_HEADER, clear_all_data, csv_filename, export_csv, export_json,
                                           json_filename)
from manasika.utils.blob_store import ALL_KEYS, InMemoryBlobStore

EXPORTED_AT = datetime(2026, 10, 19, 12, 0)


def test_csv_header_and_rows():
    content = export_csv([make_entry(5, 0, note='great day'), make_entry(2, 1)])
    lines = content.split('\n')

    assert lines[0] == CSV_HEADER == 'Date,Mood,Level,Note'
    assert lines[1] == '2026-10-19,Very High,5,"great day"'
    assert lines[2] == '2026-10-18,Low,2,""'


def test_csv_escapes_quotes_and_round_trips():
    note = 'she said "take a break", so I did'
    content = export_csv([make_entry(3, 0, note=note)])

    assert '""take a break""' in content
    rows = list(csv.DictReader(io.StringIO(content)))
    assert rows == [{'Date': '2026-10-19', 'Mood': 'Neutral', 'Level': '3', 'Note': note}]


def test_csv_with_no_entries_is_header_only():
    assert export_csv([]) == CSV_HEADER


def test_json_dump_contents():
    profile = UserProfile(name='Asha', created_at=EXPORTED_AT)
    entry = make_entry(4, 0, note='fine')

    data = json.loads(export_json(profile, [entry], now=EXPORTED_AT))

    assert data['version'] == '1.0.0'
    assert data['exportDate'] == '2026-10-19T12:00:00'
    assert data['profile']['name'] == 'Asha'
    assert data['profile']['preferences']['language'] == 'en'
    assert data['moodEntries'] == [entry.to_dict()]


def test_filenames():
    assert csv_filename(EXPORTED_AT) == 'mood-history-2026-10-19.csv'
    assert json_filename(EXPORTED_AT) == 'manasika-data-2026-10-19.json'


def test_clear_all_data_removes_every_key():
    storage = InMemoryBlobStore({key: '[]' for key in ALL_KEYS})
    storage.set('unrelated', 'kept')

    clear_all_data(storage)

    assert all(storage.get(key) is None for key in ALL_KEYS)
    assert storage.get('unrelated') == 'kept'
