# 15.10.26

import os
import re
import unicodedata


class OsManager:
    def __init__(self):
        self.max_length = 200

    def get_sanitize_file(self, filename: str) -> str:
        """Strip characters that are invalid in file names on common filesystems."""
        filename = unicodedata.normalize("NFKC", str(filename))
        filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "", filename)
        filename = filename.strip(" .")

        if len(filename) > self.max_length:
            filename = filename[:self.max_length].rstrip(" .")

        return filename or "untitled"

    def get_sanitize_path(self, path: str) -> str:
        directory, filename = os.path.split(path)
        return os.path.join(directory, self.get_sanitize_file(filename))

    def check_access(self, directory: str) -> bool:
        return os.path.isdir(directory) and os.access(directory, os.R_OK | os.W_OK)


class InternetManager:
    def format_file_size(self, size_bytes: float) -> str:
        if size_bytes <= 0:
            return "0.00 B"

        units = ["B", "KB", "MB", "GB", "TB"]
        unit_index = 0
        while size_bytes >= 1024 and unit_index < len(units) - 1:
            size_bytes /= 1024
            unit_index += 1

        return f"{size_bytes:.2f} {units[unit_index]}"

    def format_transfer_speed(self, bytes_per_second: float) -> str:
        return f"{self.format_file_size(bytes_per_second)}/s"

    def format_time(self, seconds: float) -> str:
        seconds = int(max(seconds, 0))
        hours, remainder = divmod(seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours:
            return f"{hours:d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"


os_manager = OsManager()
internet_manager = InternetManager()
