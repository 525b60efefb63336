"""Runtime wiring helper for CLI and API applications."""

import os
from dataclasses import dataclass
from pathlib import Path

from .adapters.aes_cbc import AesCbcCipher
from .adapters.yaml_codec import MarkdownNoteCodec, YamlFrontmatter
from .config import NoteVaultConfig, load_config
from .core.errors import InvalidKeyFormat
from .core.session import VaultSession, open_session
from .export.markdown import MarkdownAdapter


@dataclass
class Runtime:
    """Container for all wired components. Holds no key material."""
    vault_path: Path
    cipher: AesCbcCipher
    exporter: MarkdownAdapter
    config: NoteVaultConfig

    def resolve_key(self, key_hex: str | None = None) -> str:
        """Explicit key (even an empty one), else the configured environment variable."""
        if key_hex is not None:
            return key_hex
        env_key = os.environ.get(self.config.key.env)
        if not env_key:
            raise InvalidKeyFormat(
                f"no key given (use --key or set ${self.config.key.env})"
            )
        return env_key

    def session(self, key_hex: str | None = None) -> VaultSession:
        """Open a session on the configured vault; close it to wipe the key."""
        return self.session_for_key(self.resolve_key(key_hex))

    def session_for_key(self, key_hex: str) -> VaultSession:
        """Open a session with exactly this key; the environment is never consulted."""
        return open_session(
            self.vault_path,
            key_hex,
            cipher=self.cipher,
            temp_dir=self.config.session.temp_dir,
        )


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)

    # Use config values if CLI args not provided
    if vault_path is None:
        vault_path = config.vault.path

    return Runtime(
        vault_path=vault_path,
        cipher=AesCbcCipher(),
        exporter=MarkdownAdapter(MarkdownNoteCodec(YamlFrontmatter())),
        config=config,
    )
