from .yaml_parser import (
    DocumentLoader,
    StrictDocumentLoader,
    YamlParser,
    read_content,
    yaml_parser,
)
