"""Configuration loader for notevault.toml."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_NAME = "notevault.toml"


@dataclass
class VaultConfig:
    """Vault file location."""
    path: Path


@dataclass
class KeyConfig:
    """Where the hex key comes from when --key is not given."""
    env: str = "NOTEVAULT_KEY"


@dataclass
class SessionConfig:
    """Decrypted snapshot placement (None means the system temp dir)."""
    temp_dir: Path | None = None


@dataclass
class ServeConfig:
    """Local JSON API settings."""
    host: str = "127.0.0.1"
    port: int = 8766


@dataclass
class NoteVaultConfig:
    """Complete notevault configuration."""
    vault: VaultConfig
    key: KeyConfig
    session: SessionConfig
    serve: ServeConfig


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> NoteVaultConfig:
    """
    Load configuration from notevault.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/notevault.toml
    3. notevault.toml next to vault_path

    Args:
        config_path: Explicit path to config file
        vault_path: Vault file path for fallback search

    Returns:
        NoteVaultConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if vault_path:
        search_paths.append(vault_path.parent / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    vault_data = toml_data.get("vault", {})
    vault_config = VaultConfig(
        path=Path(vault_data.get("path", vault_path or Path("notes.vault"))),
    )

    key_data = toml_data.get("key", {})
    key_config = KeyConfig(env=key_data.get("env", "NOTEVAULT_KEY"))

    session_data = toml_data.get("session", {})
    temp_dir = session_data.get("temp_dir")
    session_config = SessionConfig(temp_dir=Path(temp_dir) if temp_dir else None)

    serve_data = toml_data.get("serve", {})
    serve_config = ServeConfig(
        host=serve_data.get("host", "127.0.0.1"),
        port=int(serve_data.get("port", 8766)),
    )

    return NoteVaultConfig(
        vault=vault_config,
        key=key_config,
        session=session_config,
        serve=serve_config,
    )
