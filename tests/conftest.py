import pytest

from relkit import constants

_ENV_VARS = (
    constants.ENV_RELEASE,
    constants.ENV_VERSION,
    constants.ENV_CONFIG,
    constants.ENV_CATALOG_URL,
    constants.ENV_CATALOG_TIMEOUT,
    constants.ENV_GAME_VERSIONS,
    constants.ENV_TOKEN,
    constants.ENV_CHANGELOG,
    constants.ENV_GITHUB_OUTPUT,
    constants.ENV_DRY_RUN,
)


@pytest.fixture(autouse=True)
def clean_release_env(tmp_path, monkeypatch):
    # 测试不受 CI 环境变量和仓库根目录下 release.yaml 影响
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(constants, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
