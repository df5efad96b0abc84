"""
Landing page for the demo.

The page is a constant: nothing from the request feeds into it, so it can be
rendered and checked without a running server.
"""

HOME_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>Socket Security Demo</title>
    <style>
        body {
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            max-width: 800px;
            margin: 50px auto;
            padding: 20px;
            background: #f5f5f5;
        }
        .container {
            background: white;
            padding: 40px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }
        h1 {
            color: #2c3e50;
            margin-bottom: 10px;
        }
        .subtitle {
            color: #7f8c8d;
            margin-bottom: 30px;
        }
        .info-box {
            background: #e3f2fd;
            border-left: 4px solid #2196f3;
            padding: 15px;
            margin: 20px 0;
        }
        code {
            background: #f4f4f4;
            padding: 2px 6px;
            border-radius: 3px;
            font-family: 'Courier New', monospace;
        }
        .footer {
            margin-top: 30px;
            padding-top: 20px;
            border-top: 1px solid #eee;
            color: #7f8c8d;
            font-size: 14px;
        }
    </style>
</head>
<body>
    <div class="container">
        <h1>&#128274; Socket Security Demo</h1>
        <p class="subtitle">GitHub Actions + Socket CLI Reachability Integration</p>

        <div class="info-box">
            <strong>&#9989; Server is running!</strong><br>
            This minimal Python application demonstrates Socket Security's
            CLI integration for reachability analysis.
        </div>

        <h2>What's Being Scanned?</h2>
        <p>This application includes several PyPI dependencies:</p>
        <ul>
            <li><code>fastapi</code> - Web framework</li>
            <li><code>uvicorn</code> - ASGI server</li>
            <li><code>pydantic</code> - Data validation</li>
            <li><code>itsdangerous</code> - Cookie signing</li>
            <li>...and more</li>
        </ul>

        <h2>GitHub Actions Workflow</h2>
        <p>When you push changes or open a PR, the Socket CLI:</p>
        <ol>
            <li>Analyzes all dependencies</li>
            <li>Performs reachability analysis</li>
            <li>Generates <code>.socket.facts.json</code></li>
            <li>Uploads results as workflow artifacts</li>
        </ol>

        <div class="footer">
            <p>&#128218; Learn more: <a href="https://docs.socket.dev">docs.socket.dev</a></p>
            <p>Based on <a href="https://github.com/OWASP/NodeGoat">OWASP NodeGoat</a></p>
        </div>
    </div>
</body>
</html>
"""


def render_home_page() -> str:
    return HOME_PAGE
