from product_catalog.app import main


if __name__ == "__main__":
    main()
