import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from .models import CONFIG_DIR, CONFIG_FILE

logger = logging.getLogger(__name__)


class ShellIntegration:
    """Installs the ``cswitch`` shell function and auto-load hook into a shell profile."""

    def __init__(self):
        self.marker_start = "# === cswitch shell integration (start) ==="
        self.marker_end = "# === cswitch shell integration (end) ==="

    def get_shell_type(self) -> Optional[str]:
        """检测当前shell类型（仅支持 zsh 与 bash）"""
        shell = os.environ.get('SHELL', '')
        if 'zsh' in shell:
            return 'zsh'
        elif 'bash' in shell:
            return 'bash'
        return None

    def get_shell_config_path(self) -> Optional[Path]:
        """获取shell配置文件路径"""
        home = Path.home()
        shell_type = self.get_shell_type()

        if shell_type == 'zsh':
            return home / '.zshrc'
        elif shell_type == 'bash':
            bashrc = home / '.bashrc'
            bash_profile = home / '.bash_profile'
            if bashrc.exists():
                return bashrc
            if bash_profile.exists():
                return bash_profile
            return bashrc
        return None

    def get_integration_code(self) -> str:
        """获取要注入的shell集成代码"""
        return f'''cswitch() {{
  local output
  output=$(command cswitch "$@")
  local exit_code=$?

  # Only eval output that carries exports (skip init, help, list, etc.)
  if [ $exit_code -eq 0 ] && echo "$output" | grep -q "export ANTHROPIC"; then
    eval "$output"
  else
    [ -n "$output" ] && echo "$output"
    return $exit_code
  fi
}}

# Auto-load last used configuration
if [ -f ~/{CONFIG_DIR}/{CONFIG_FILE} ]; then
  eval "$(command cswitch --silent --auto-load 2>/dev/null)" || true
fi'''

    def is_installed(self, config_path: Optional[Path] = None) -> bool:
        config_path = config_path or self.get_shell_config_path()
        if config_path is None or not config_path.exists():
            return False

        try:
            return self.marker_start in config_path.read_text(encoding='utf-8')
        except OSError:
            return False

    def install(self, config_path: Optional[Path] = None) -> Path:
        """安装shell集成，已存在的集成块会被替换

        Returns the profile that was modified.
        """
        config_path = config_path or self.get_shell_config_path()
        if config_path is None:
            raise RuntimeError("Could not detect shell profile. Supported shells: zsh, bash")

        config_path.parent.mkdir(parents=True, exist_ok=True)
        self.uninstall(config_path)

        existing_content = ""
        if config_path.exists():
            backup_path = config_path.with_suffix(config_path.suffix + '.cswitch.backup')
            shutil.copy2(config_path, backup_path)
            existing_content = config_path.read_text(encoding='utf-8')

        block = f"\n{self.marker_start}\n{self.get_integration_code()}\n{self.marker_end}\n"
        config_path.write_text(existing_content + block, encoding='utf-8')
        logger.info("Shell integration added to: %s", config_path)
        return config_path

    def uninstall(self, config_path: Optional[Path] = None) -> bool:
        """卸载shell集成

        Returns True if a block was removed.
        """
        config_path = config_path or self.get_shell_config_path()
        if config_path is None or not config_path.exists():
            return False

        content = config_path.read_text(encoding='utf-8')
        start_idx = content.find(self.marker_start)
        if start_idx == -1:
            return False

        end_idx = content.find(self.marker_end, start_idx)
        if end_idx == -1:
            raise RuntimeError("Shell integration block is malformed (missing end marker)")

        # drop the newlines install() put around the block
        before = content[:start_idx]
        after = content[end_idx + len(self.marker_end):]
        if before.endswith("\n"):
            before = before[:-1]
        if after.startswith("\n"):
            after = after[1:]
        config_path.write_text(before + after, encoding='utf-8')
        logger.info("Shell integration removed from: %s", config_path)
        return True
