"""CLI constants."""

GREEN = "\033[92m"
RESET = "\033[0m"

CONFIG_PATH_PARTS = ('.chunkrelay', 'config.json')

SIZE_UNITS = {
    'b': 1,
    'k': 1024,
    'kb': 1000,
    'kib': 1024,
    'm': 1024 ** 2,
    'mb': 1000 ** 2,
    'mib': 1024 ** 2,
    'g': 1024 ** 3,
    'gb': 1000 ** 3,
    'gib': 1024 ** 3,
}

HELP_TEXT = """Usage:
  split <file> <chunk-dir> [--chunk-size SIZE]
      Split a file into {base}.part_{n} artifacts inside chunk-dir.
  merge <file-name> <total-chunks> <chunk-dir> <output-dir>
      Concatenate the artifacts of file-name back into output-dir.
  upload <file> [--chunk-size SIZE]
      Split a file and send every chunk to the assembler service.
  help
      Show this message.

Options:
  --debug   Enable debug logging
  SIZE accepts plain bytes or a unit suffix (e.g. 512KiB, 5MiB, 10MB)."""
