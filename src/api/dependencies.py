import os

from fastapi import Depends

from api import state
from api.backend import BackendAPI
from integration.canvas_client import CanvasClient, CanvasConfig
from storage.options_store import OptionsStore
from todo_planner.models import Options

# Configuration
OPTIONS_PATH = os.getenv("OPTIONS_PATH", "data/options.json")


def get_backend() -> BackendAPI:
    if state.backend is None:
        state.backend = BackendAPI(client=CanvasClient(CanvasConfig.from_env()))
    return state.backend


def get_options_store() -> OptionsStore:
    if state.options_store is None:
        state.options_store = OptionsStore(path=OPTIONS_PATH)
    return state.options_store


def get_options(store: OptionsStore = Depends(get_options_store)) -> Options:
    return store.load()
