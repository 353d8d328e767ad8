#!/usr/bin/env python3
"""
Posts an annotation document to a running liveness API.
"""

import requests
import sys
from pathlib import Path

from app.annotation_parser import AnnotationFormatError, read_annotation_document

def post_annotations(annotation_path: str, api_url: str = "http://localhost:8000"):
    """
    Sends the annotation document to the evaluation endpoint and prints the verdict.

    Args:
        annotation_path: Path of the annotation JSON file
        api_url: Base URL of the API
    """
    endpoint = f"{api_url}/liveness/evaluate"

    if not Path(annotation_path).exists():
        print(f"Error: Annotation file not found: {annotation_path}")
        return

    print(f"Evaluating annotations: {annotation_path}")
    print(f"Endpoint: {endpoint}")

    try:
        document = read_annotation_document(annotation_path)

        print("Sending request...")
        response = requests.post(endpoint, json=document, timeout=30)

        print(f"Status Code: {response.status_code}")
        print(f"Response:")
        print(response.json())

    except AnnotationFormatError as e:
        print(f"Invalid annotation file: {e}")
    except requests.exceptions.RequestException as e:
        print(f"Request error: {e}")

def check_health(api_url: str = "http://localhost:8000"):
    """
    Calls the health endpoint.
    """
    try:
        response = requests.get(f"{api_url}/health", timeout=10)
        print(f"Health Check Status: {response.status_code}")
        print(f"Response: {response.json()}")
    except requests.exceptions.RequestException as e:
        print(f"Health check failed: {e}")

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python check_annotations.py <annotations.json> [api_url]")
        print("Example: python check_annotations.py annotations.json")
        sys.exit(1)

    annotation_path = sys.argv[1]
    api_url = sys.argv[2] if len(sys.argv) > 2 else "http://localhost:8000"

    print("=== Health Check ===")
    check_health(api_url)
    print()

    print("=== Liveness Evaluation ===")
    post_annotations(annotation_path, api_url)
