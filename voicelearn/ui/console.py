from rich.console import Console
from rich.theme import Theme

theme = Theme({
    "error": "red bold",
    "notice": "yellow",
    "listening": "bold green",
    "processing": "bold yellow",
    "idle": "bold blue",
    "transcript": "dim",
    "hint": "dim italic",
    "banner": "bold",
})

console = Console(theme=theme)
