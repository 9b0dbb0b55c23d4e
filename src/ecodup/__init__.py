from .finder import find_duplicates, validate_arguments, run_finder, FinderArgs
from .errors import EcodupError, InvalidArgument, IOFailure, ReportNotFound
from .scan.entry import FileSystemEntry
from .commands.duplicated_dirs import DirectoryLevelGroup, directory_level_groups, find_duplicated_dirs
from .commands.duplicated_files import find_duplicated_files
from .report.records import DuplicateScanResult, DuplicateFileGroup, DuplicateDirectory, MemberFile
from .report.store import ReportManifest, ReportStore
from .settings import Settings
from .utils.processor import Processor, HashAlgorithm
