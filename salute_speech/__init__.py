"""SaluteSpeech async recognition client.

WHY: SaluteSpeech recognizes long audio through an asynchronous REST
workflow (token, upload, task, polling, download). This package wraps that
workflow behind one call that turns an audio file into text.

HOW: Two layers: the API client (token management, request builders,
polling) and a pure aggregator that flattens the downloaded segments into
raw and normalized text. A small CLI sits on top.

RULES:
- All HTTP calls go through SaluteSpeechClient
- The aggregator never touches the network
"""

__version__ = "0.1.0"
