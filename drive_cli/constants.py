"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

from drive_common.constants import DEFAULT_API_PORT, SORT_FIELDS, VIEW_NAMES

COMMANDS = [
    "register", "login", "upload", "ls", "search", "folders", "mkdir", "rename", "mv",
    "star", "unstar", "trash", "restore", "rm", "rmdir", "download", "usage",
    "clear", "help", "exit",
]

VIEWS = VIEW_NAMES
SORT_ORDERS = ("asc", "desc")
SORTS = SORT_FIELDS

CONFIG_DIR_NAME = ".clouddrive"
DEFAULT_API_URL = f"http://localhost:{DEFAULT_API_PORT}"
DOWNLOADS_DIR = "downloads"

STYLE = Style.from_dict(
    {
        "prompt": "#3B82F6 bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;59;130;246m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
   ____ _                 _   ____       _
  / ___| | ___  _   _  __| | |  _ \\ _ __(_)_   _____
 | |   | |/ _ \\| | | |/ _` | | | | | '__| \\ \\ / / _ \\
 | |___| | (_) | |_| | (_| | | |_| | |  | |\\ V /  __/
  \\____|_|\\___/ \\__,_|\\__,_| |____/|_|  |_| \\_/ \\___|
{RESET}"""

WELCOME_TITLE = "Cloud Drive CLI"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "drive> "

HELP_TEXT = """Available commands:
  register <username> <password>         Register new user account
  login <username> <password>            Login and get API key
  upload <path>... [--folder ID]         Upload up to 10 files, optionally into a folder
  ls [view] [--folder ID] [--page N] [--limit N] [--sort FIELD] [--order asc|desc]
                                         List files; views: my-drive, recent, starred, trash
  search <query> [--page N] [--limit N]  Search file names and types
  folders [--parent ID]                  List folders at the root or under a folder
  mkdir <name> [--parent ID]             Create a folder
  rename <id> <name>                     Rename a file
  mv <id> <folderId|root>                Move a file into a folder or back to the root
  star <id> / unstar <id>                Star or unstar a file
  trash <id> / restore <id>              Move a file to the trash or restore it
  rm <id>                                Permanently delete a file
  rmdir <id> [--policy reject|cascade|orphan]
                                         Delete a folder
  download <id> [output_path]            Download a file (defaults to downloads/)
  usage                                  Show storage usage
  clear                                  Clear screen and redisplay welcome message
  help                                   Show this help
  exit                                   Exit REPL

Examples:
  register alice mypassword123
  upload report.pdf photos/cat.png --folder 3
  ls recent --limit 20
  ls --sort size --order desc
  search invoice
  mv 12 root"""
