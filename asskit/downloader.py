"""
ASS downloader for ASSKit.

Fetches an ASS document from an HTTP(S) URL, typically a short-lived signed
storage URL, and either saves it to disk or parses it straight into a
ParsedDocument for editing.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from .document import parse_ass_content
from .models import DownloadConfig, ParsedDocument

logger = logging.getLogger(__name__)


def download_ass_content(url: str, timeout: int = 30, verify_ssl: bool = True) -> str:
    """
    Download raw ASS content from a URL.

    Args:
        url: HTTP(S) URL of the ASS file
        timeout: Request timeout in seconds (default: 30)
        verify_ssl: Whether to verify SSL certificates (default: True)

    Returns:
        ASS content as string

    Raises:
        requests.RequestException: If the request fails or returns an error status
    """
    logger.info(f"Downloading ASS from: {url[:100]}...")

    try:
        response = requests.get(url, timeout=timeout, verify=verify_ssl)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Failed to download ASS from {url[:100]}: {str(e)}")
        raise

    return response.text


def _filename_from_url(url: str) -> str:
    name = Path(urlparse(url).path).name
    if not name:
        return "captions.ass"
    if not name.lower().endswith('.ass'):
        name = f"{Path(name).stem or 'captions'}.ass"
    return name


class ASSDownloader:
    """
    Downloader for remote ASS documents.

    Downloads go through a single ``requests.get`` per call; there is no
    retry or caching.
    """

    def __init__(self, timeout: int = 30, verify_ssl: bool = True):
        """
        Initialize ASS downloader.

        Args:
            timeout: Request timeout in seconds (default: 30)
            verify_ssl: Whether to verify SSL certificates (default: True)
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    def download(self, url: str, output_dir: str, filename: Optional[str] = None) -> str:
        """
        Download an ASS file and save it to the local filesystem.

        Args:
            url: URL to download the ASS file from
            output_dir: Directory to save the file in (created if missing)
            filename: Local file name (default: derived from the URL path)

        Returns:
            Local file path where the ASS file was saved

        Raises:
            requests.RequestException: If the download fails
            OSError: If the file cannot be written
        """
        content = download_ass_content(url, timeout=self.timeout, verify_ssl=self.verify_ssl)

        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, filename or _filename_from_url(url))

        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to save ASS: {str(e)}")
            raise

        logger.info(f"ASS saved to: {output_path}")
        return output_path

    def download_from_config(self, config: DownloadConfig) -> str:
        """
        Download ASS using a DownloadConfig object.

        The config's timeout and SSL settings apply to this call only.
        """
        downloader = ASSDownloader(timeout=config.timeout, verify_ssl=config.verify_ssl)
        return downloader.download(config.url, config.output_dir, filename=config.filename)

    def load(self, url: str) -> ParsedDocument:
        """
        Download and parse an ASS document without touching disk.

        Raises:
            requests.RequestException: If the download fails
            ParseError: If the content is not a usable ASS document
        """
        content = download_ass_content(url, timeout=self.timeout, verify_ssl=self.verify_ssl)
        return parse_ass_content(content)
