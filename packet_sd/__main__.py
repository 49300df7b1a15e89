from packet_sd.main import main

main()
