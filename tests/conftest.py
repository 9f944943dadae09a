from __future__ import annotations

import pytest

from netcfg_inventory.aws import clients


@pytest.fixture(autouse=True)
def _reset_client_state():
    clients.set_client_connection_pool_size(None)
    clients.clear_client_cache()
    yield
    clients.set_client_connection_pool_size(None)
    clients.clear_client_cache()
