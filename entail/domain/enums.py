from enum import Enum


class Verdict(str, Enum):
    TRUE = 'true'
    FALSE = 'false'


class ClassifierState(str, Enum):
    UNINITIALIZED = 'uninitialized'
    OPEN = 'open'
    QUERYING = 'querying'
    FATAL = 'fatal'
    CLOSED = 'closed'


class ParserBackend(str, Enum):
    SPACY = 'spacy'
    SIMPLE = 'simple'
