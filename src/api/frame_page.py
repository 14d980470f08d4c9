"""
Frame entry document - HTML with frame protocol meta tags.

Frame hosts read the fc:frame:* tags to render the first screen; every
later screen comes from POST callbacks to the post URL.
"""

from html import escape

from src.domain.frame import FrameResponse


def _meta(name: str, content: str) -> str:
    return f'<meta property="{escape(name)}" content="{escape(content)}" />'


def render_frame_document(app_url: str, frame: FrameResponse) -> str:
    """Build the HTML document advertising the frame's first screen."""
    tags = [
        _meta("og:title", "Farcaster Names - Register .celo Domains"),
        _meta(
            "og:description",
            "Own your Farcaster identity with a verifiable NFT domain on Celo mainnet",
        ),
        _meta("og:image", frame.image),
        _meta("og:url", app_url),
        _meta("fc:frame", "vNext"),
        _meta("fc:frame:image", frame.image),
        _meta("fc:frame:image:aspect_ratio", "1.91:1"),
        _meta("fc:frame:post_url", frame.post_url),
        _meta("fc:frame:state", frame.state),
    ]
    for index, button in enumerate(frame.buttons, start=1):
        tags.append(_meta(f"fc:frame:button:{index}", button.label))
        tags.append(_meta(f"fc:frame:button:{index}:action", button.action.value))
        if button.target:
            tags.append(_meta(f"fc:frame:button:{index}:target", button.target))

    head = "\n    ".join(tags)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Farcaster Names</title>
    {head}
</head>
<body>
    <h1>Farcaster Names</h1>
    <p>Register domain names with NFT functionality on Celo mainnet</p>
    <p>Open this link in a Farcaster client to interact with the frame!</p>
</body>
</html>
"""
