from storage.options_store import OptionsStore
from todo_planner.models import DEFAULT_THEME_COLOR, Options


def test_options_roundtrip(tmp_path):
    store = OptionsStore(path=str(tmp_path / "options.json"))
    store.save(Options(theme_color="#ff8800", dash_courses=True, start_day=1))
    loaded = store.load()
    assert loaded.theme_color == "#ff8800"
    assert loaded.dash_courses is True
    assert loaded.start_day == 1


def test_missing_file_gives_defaults(tmp_path):
    store = OptionsStore(path=str(tmp_path / "nested" / "options.json"))
    assert store.load() == Options()
    store.save(Options())
    assert (tmp_path / "nested" / "options.json").exists()


def test_options_corrupted_file(tmp_path):
    p = tmp_path / "options.json"
    p.write_text("{not valid json")
    opts = OptionsStore(path=str(p)).load()
    assert isinstance(opts, Options)
    assert opts.theme_color == DEFAULT_THEME_COLOR


def test_out_of_range_value_gives_defaults(tmp_path):
    p = tmp_path / "options.json"
    p.write_text('{"start_day": 9}')
    assert OptionsStore(path=str(p)).load() == Options()
