[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sockdemo"
version = "0.1.0"
description = "Small single-threaded TCP and UDP servers: group chat, remote command shell, e-mail address generator and two-party UDP chat"
requires-python = ">=3.10"
dependencies = []
keywords = ["socket", "chat", "select", "selectors", "udp", "tcp", "telnet", "server"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sockdemo-chat-select = "sockdemo.chat_select:main"
sockdemo-chat-poll = "sockdemo.chat_poll:main"
sockdemo-telnet = "sockdemo.telnet:main"
sockdemo-email = "sockdemo.email_server:main"
sockdemo-udp-chat = "sockdemo.udp_chat:main"

[tool.hatch.build.targets.wheel]
packages = ["sockdemo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
