"""Selection-triggered translation and explanation for a PDF reader."""

APP_NAME = "pedaru-assist"
APP_VERSION = "0.1.0"
