"""Asset file validation, naming, and upload/replace/delete lifecycle."""
