import pytest

from binance_gateway.env_setup import setup_environment
from binance_gateway.helpers import DEFAULT_API_URL, DEFAULT_STREAM_URL

VARIABLES = (
    "ENVIRONMENT",
    "BINANCE_API_ENDPOINT_PRODUCTION",
    "BINANCE_STREAM_ENDPOINT_PRODUCTION",
    "BINANCE_API_KEY_PRODUCTION",
    "BINANCE_API_SECRET_PRODUCTION",
    "BINANCE_API_ENDPOINT_TESTNET",
    "BINANCE_STREAM_ENDPOINT_TESTNET",
    "BINANCE_API_KEY_TESTNET",
    "BINANCE_API_SECRET_TESTNET",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults_without_configuration(clean_env):
    assert setup_environment() == (DEFAULT_API_URL, DEFAULT_STREAM_URL, None, None)


def test_reads_environment_specific_variables(clean_env):
    clean_env.setenv("ENVIRONMENT", "testnet")
    clean_env.setenv("BINANCE_API_ENDPOINT_TESTNET", "https://testnet.binance.vision")
    clean_env.setenv("BINANCE_STREAM_ENDPOINT_TESTNET", "wss://testnet.binance.vision/ws/")
    clean_env.setenv("BINANCE_API_KEY_TESTNET", "key")
    clean_env.setenv("BINANCE_API_SECRET_TESTNET", "secret")
    # other environments are ignored
    clean_env.setenv("BINANCE_API_KEY_PRODUCTION", "prod-key")

    assert setup_environment() == (
        "https://testnet.binance.vision",
        "wss://testnet.binance.vision/ws/",
        "key",
        "secret",
    )


def test_empty_credentials_are_unset(clean_env):
    clean_env.setenv("BINANCE_API_KEY_PRODUCTION", "")
    clean_env.setenv("BINANCE_API_SECRET_PRODUCTION", "")

    _, _, api_key, api_secret = setup_environment()
    assert api_key is None
    assert api_secret is None


def test_loads_dotenv_file(clean_env, tmp_path):
    tmp_path.joinpath(".env").write_text(
        "ENVIRONMENT=production\n"
        "BINANCE_API_KEY_PRODUCTION=from-dotenv\n"
        "BINANCE_API_SECRET_PRODUCTION=dotenv-secret\n"
    )
    # load_dotenv writes into os.environ, register them for cleanup
    clean_env.setenv("BINANCE_API_KEY_PRODUCTION", "placeholder")
    clean_env.delenv("BINANCE_API_KEY_PRODUCTION")
    clean_env.setenv("BINANCE_API_SECRET_PRODUCTION", "placeholder")
    clean_env.delenv("BINANCE_API_SECRET_PRODUCTION")
    clean_env.setenv("ENVIRONMENT", "placeholder")
    clean_env.delenv("ENVIRONMENT")

    _, _, api_key, api_secret = setup_environment()
    assert api_key == "from-dotenv"
    assert api_secret == "dotenv-secret"
