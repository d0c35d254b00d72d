"""Run a CHIP-8 ROM headless for a fixed amount of emulated time.

    python run.py rom=roms/IBM.ch8 seconds=2 screenshot=ibm.png
    python run.py rom=roms/PONG.ch8 quirks.bit_shift=shift_y_into_x log_level=DEBUG
"""

import hydra
from omegaconf import DictConfig, OmegaConf

from chipper import Chip8, Chip8Error, Chip8Output, disassemble
from chipper.logging import frame_progress
from chipper.rendering import display_to_text, save_screenshot


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    cfg = OmegaConf.to_container(cfg)

    chip8 = Chip8.from_config(cfg)
    logger = chip8.logger
    rom_path = hydra.utils.to_absolute_path(cfg.pop("rom"))
    chip8.load_rom_from_file(rom_path)

    if cfg.get("disassemble"):
        with open(rom_path, "rb") as f:
            for address, word, text in disassemble(f.read()):
                logger.info(f"{address:03X}: {word:04X}  {text}")

    fps = cfg.get("fps", 60)
    num_frames = int(cfg.get("seconds", 5.0) * fps)
    frame_time = 1.0 / fps

    redraws = 0
    with frame_progress(num_frames, disable=logger.log_level == "DEBUG") as progress:
        for _ in range(num_frames):
            try:
                output = chip8.tick(frame_time)
            except Chip8Error:
                logger.critical("Emulation stopped")
                break
            redraws += int(output == Chip8Output.REDRAW)
            progress.update(1)

    logger.info(f"{redraws} frames redrawn")
    logger.info("Registers:\n" + chip8.register_dump())
    logger.info("Display:\n" + display_to_text(chip8.display))

    if cfg.get("screenshot"):
        path = hydra.utils.to_absolute_path(cfg["screenshot"])
        save_screenshot(chip8.display, path, cfg.get("scale", 8), cfg.get("color_scheme", "classic"))
        logger.info(f"Screenshot saved: {path}")


if __name__ == "__main__":
    main()
