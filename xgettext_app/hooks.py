# FILE: xgettext_app/hooks.py
app_name = "xgettext_app"
app_title = "Xgettext App"
app_publisher = "Xgettext App Developers"
app_description = "Extracts translatable messages and keeps gettext catalogs in sync"

app_license = "mit"


# Namespace that receives messages without an explicit namespace prefix
default_namespace = "messages"

# Task options applied before the config file and CLI overrides
default_task_options = {
    "function_name": "tr",
    "process_message": "identity",
    "namespace_separator": ".",
    "pot_path": ".",
}

# One PO file per (namespace, language): <po_path>/<namespace>-<language>.po
default_languages = ["en"]

# Config file looked up in the working directory when --config is not given
default_config_file = "xgettext.json"

# Format identifiers accepted in a task's "files" mapping
extractor_types = [
    "angular",
    "handlebars",
    "vue",
    "json",
    "javascript",
]

# Source paths never scanned, even when a glob matches them
default_ignore_globs = [
    "**/node_modules/**",
    "**/dist/**",
    "**/.git/**",
]
