"""Generate a sample PNG (with transparency) for image_convert job demos."""
import os

from PIL import Image, ImageDraw

os.makedirs("sample_data", exist_ok=True)

img = Image.new("RGBA", (800, 600), color=(41, 128, 185, 255))
draw = ImageDraw.Draw(img)

# Grid pattern so the converted output is easy to eyeball
for x in range(0, 800, 40):
    draw.line([(x, 0), (x, 600)], fill=(52, 152, 219, 255), width=1)
for y in range(0, 600, 40):
    draw.line([(0, y), (800, y)], fill=(52, 152, 219, 255), width=1)

# Semi-transparent rectangle: PNG → JPG has to flatten the alpha channel
draw.rectangle([200, 150, 600, 450], fill=(231, 76, 60, 128), outline=(192, 57, 43, 255), width=3)

img.save("sample_data/sample.png", "PNG")
print("Created sample_data/sample.png (800x600, RGBA)")
