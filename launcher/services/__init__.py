"""
Services Module - scan orchestration, launching and session state
"""
from launcher.services.scan_service import ScanService, ScanCompletion
from launcher.services.launch_service import LaunchCoordinator, shell_open, request_exit
from launcher.services.session import LauncherSession
