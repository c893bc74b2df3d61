from card_crop_tool.app import main

main()
