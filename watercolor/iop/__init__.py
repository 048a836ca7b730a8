"""Image operations. Each class takes its parameters in __init__ and exposes process(image)."""
