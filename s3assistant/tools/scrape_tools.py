"""
Scrape Tools - fetch a web page, save it locally, upload it to storage
"""

import logging
import os
from typing import Any, Dict, Optional

import requests
from bs4 import BeautifulSoup

from .file_tools import PASSTHROUGH_S3_KEYS, remove_local_file
from .storage_tools import StorageTools

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class ScrapeTools:
    """Website scraping into object storage"""

    def __init__(self, storage_tools: Optional[StorageTools] = None, session: Optional[requests.Session] = None):
        self.storage_tools = storage_tools or StorageTools()
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Fetch a page (redirects followed).

        Returns:
            Dict with success flag, content, content type and status code
        """
        try:
            response = self.session.get(
                url,
                headers={**DEFAULT_HEADERS, **(headers or {})},
                timeout=REQUEST_TIMEOUT,
                allow_redirects=True,
            )
            response.raise_for_status()
        except requests.Timeout:
            return {"success": False, "error": f"Request timeout ({REQUEST_TIMEOUT}s)"}
        except requests.HTTPError as e:
            failed = e.response
            return {
                "success": False,
                "error": f"HTTP {failed.status_code}: {failed.reason}",
                "status_code": failed.status_code,
            }
        except requests.RequestException as e:
            return {"success": False, "error": str(e)}

        return {
            "success": True,
            "content": response.text,
            "content_length": len(response.text),
            "content_type": response.headers.get("content-type", "text/html"),
            "status_code": response.status_code,
            "final_url": response.url,
        }

    def scrape_website_to_file(self, params: Dict[str, Any]) -> Dict[str, Any]:
        for name, message in (
            ("url", "url is required."),
            ("bucketName", "bucketName is required."),
            ("localFilePath", "localFilePath is required to save scraped content."),
        ):
            if not params.get(name):
                return {"success": False, "message": f"Error: {message}", "received_params": params}

        url = params["url"]
        local_path = params["localFilePath"]
        keep_local = bool(params.get("keepLocalFile", False))
        extract_text = bool(params.get("extractText", False))

        self.logger.info(f"Scraping website: {url}")
        scraped = self.fetch(url, params.get("requestHeaders"))
        if not scraped["success"]:
            return {
                "success": False,
                "message": f"❌ Failed to scrape website: {scraped['error']}",
                "url": url,
            }

        soup = BeautifulSoup(scraped["content"], "html.parser")
        title = soup.title.string.strip() if soup.title and soup.title.string else None

        content = scraped["content"]
        content_type = params.get("contentType") or scraped["content_type"]
        if extract_text:
            for tag in soup(["script", "style", "noscript"]):
                tag.decompose()
            content = soup.get_text(separator="\n", strip=True)
            content_type = params.get("contentType") or "text/plain"

        try:
            parent = os.path.dirname(local_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(local_path, "w", encoding="utf-8") as f:
                f.write(content)
            file_size = os.path.getsize(local_path)
        except OSError as e:
            return {
                "success": False,
                "message": f"❌ Failed to save to local file: {e}",
                "local_file_path": local_path,
            }

        s3_key = params.get("s3Key") or os.path.basename(local_path)
        upload_params = {
            "bucketName": params["bucketName"],
            "filePath": local_path,
            "s3Key": s3_key,
            "contentType": content_type,
        }
        upload_params.update({k: params[k] for k in PASSTHROUGH_S3_KEYS if params.get(k) is not None})

        self.logger.info(f"Uploading scraped content to {params['bucketName']}/{s3_key}")
        upload_result = self.storage_tools.put_object(upload_params)
        if not upload_result["success"]:
            return {
                "success": False,
                "message": f"❌ Failed to upload to storage: {upload_result['message']}",
                "upload_result": upload_result,
            }

        if not keep_local:
            remove_local_file(local_path)

        return {
            "success": True,
            "message": "✅ Successfully scraped website, saved to file, and uploaded to storage!",
            "scrape_info": {
                "url": url,
                "final_url": scraped["final_url"],
                "title": title,
                "content_length": scraped["content_length"],
                "content_type": scraped["content_type"],
                "status_code": scraped["status_code"],
                "extracted_text": extract_text,
            },
            "file_info": {
                "local_file_path": local_path,
                "file_size": file_size,
                "keep_local_file": keep_local,
            },
            "upload_info": {
                "bucket_name": params["bucketName"],
                "s3_key": s3_key,
                "upload_mode": upload_result.get("upload_mode"),
            },
            "aws_response": upload_result.get("aws_response"),
        }
